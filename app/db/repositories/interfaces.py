"""Интерфейсы хранилищ, от которых зависят сервисы."""

from typing import Optional, Protocol

from app.db.models import PullRequest, Team, User
from app.schemas.user import ReviewerReassignmentSchema


class TeamStore(Protocol):
    async def get_by_name(self, team_name: str, load_members: bool = True) -> Optional[Team]: ...

    async def exists(self, team_name: str) -> bool: ...

    async def create_with_members(self, team_name: str, members: list[dict]) -> Team: ...

    async def delete_by_name(self, team_name: str) -> bool: ...

    async def deactivate_team_members(
        self,
        team: Team,
        user_ids: list[str],
        reassignments: list[ReviewerReassignmentSchema],
    ) -> list[str]: ...


class UserStore(Protocol):
    async def get_by_id(self, user_id: str, load_team: bool = False) -> Optional[User]: ...

    async def update_active(self, user_id: str, is_active: bool) -> Optional[User]: ...


class PRStore(Protocol):
    async def get_by_id(self, pr_id: str) -> Optional[PullRequest]: ...

    async def exists(self, pr_id: str) -> bool: ...

    async def create_with_reviewers(
        self,
        pr_id: str,
        pr_name: str,
        author_id: str,
        reviewer_ids: list[str],
        need_more_reviewers: bool,
    ) -> PullRequest: ...

    async def merge(self, pr_id: str) -> bool: ...


class ReviewerStore(Protocol):
    async def get_assigned_reviewers(self, pr_id: str) -> list[str]: ...

    async def get_prs_by_reviewer(self, user_id: str) -> list[PullRequest]: ...

    async def reassign_reviewer_atomic(
        self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str
    ) -> None: ...


class StatsStore(Protocol):
    async def get_stats(self) -> list[dict] | dict: ...

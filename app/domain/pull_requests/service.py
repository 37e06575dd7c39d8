"""Сервис для работы с Pull Request'ами."""

import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    NoCandidateException,
    NotAssignedException,
    NotFoundException,
    PRExistsException,
    PRMergedException,
)
from app.core.metrics import observe_pr_merged, record_reassignments
from app.db.models import PR_STATUS_MERGED, PullRequest
from app.db.repositories.interfaces import PRStore, ReviewerStore, TeamStore, UserStore
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.reviewer_repository import ReviewerRepository
from app.db.repositories.team_repository import TeamRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService
from app.domain.reviewers.selection import MAX_REVIEWERS_COUNT, select_reviewers

logger = logging.getLogger(__name__)


class PullRequestService(BaseService):
    """Сервис для работы с Pull Request'ами."""

    def __init__(
        self,
        session: AsyncSession,
        rng: random.Random | None = None,
        *,
        pr_repo: PRStore | None = None,
        reviewer_repo: ReviewerStore | None = None,
        user_repo: UserStore | None = None,
        team_repo: TeamStore | None = None,
    ):
        super().__init__(session, rng)
        self.pr_repo = pr_repo or PRRepository(session)
        self.reviewer_repo = reviewer_repo or ReviewerRepository(session)
        self.user_repo = user_repo or UserRepository(session)
        self.team_repo = team_repo or TeamRepository(session)

    async def create_pr(self, pr_id: str, pr_name: str, author_id: str) -> dict:
        """Создать PR и автоматически назначить до двух ревьюверов из команды автора."""
        author = await self.user_repo.get_by_id(author_id, load_team=True)
        if not author:
            raise NotFoundException("Author")

        team = await self.team_repo.get_by_name(author.team.team_name) if author.team else None
        if not team:
            raise NotFoundException("Team")

        # гонку между проверкой и вставкой ловит create_with_reviewers
        if await self.pr_repo.exists(pr_id):
            raise PRExistsException()

        reviewer_ids = select_reviewers(team.members, author_id, MAX_REVIEWERS_COUNT, self.rng)
        need_more = len(reviewer_ids) < MAX_REVIEWERS_COUNT

        pr = await self.pr_repo.create_with_reviewers(
            pr_id, pr_name, author_id, reviewer_ids, need_more
        )

        if need_more:
            logger.warning(
                "PR %s created with %d reviewer(s), team %s has no more candidates",
                pr_id,
                len(reviewer_ids),
                team.team_name,
            )
        logger.info("PR %s created, reviewers: %s", pr_id, reviewer_ids)

        return {"pr": self._pr_to_schema(pr, reviewer_ids)}

    async def get_pr(self, pr_id: str) -> dict:
        """Получить PR по идентификатору."""
        pr = await self.pr_repo.get_by_id(pr_id)
        if not pr:
            raise NotFoundException("PR")

        reviewers = await self.reviewer_repo.get_assigned_reviewers(pr_id)
        return {"pr": self._pr_to_schema(pr, reviewers)}

    async def merge_pr(self, pr_id: str) -> dict:
        """Пометить PR как MERGED (идемпотентная операция)."""
        pr = await self.pr_repo.get_by_id(pr_id)
        if not pr:
            raise NotFoundException("PR")

        if pr.status != PR_STATUS_MERGED:
            merged_now = await self.pr_repo.merge(pr_id)
            await self.session.refresh(pr)
            if merged_now:
                observe_pr_merged(pr.created_at, pr.merged_at)
                logger.info("PR %s merged", pr_id)

        reviewers = await self.reviewer_repo.get_assigned_reviewers(pr_id)
        return {"pr": self._pr_to_schema(pr, reviewers)}

    async def reassign_reviewer(self, pr_id: str, old_user_id: str) -> dict:
        """Переназначить ревьювера на другого активного участника его команды."""
        pr = await self.pr_repo.get_by_id(pr_id)
        if not pr:
            raise NotFoundException("PR")

        if pr.status == PR_STATUS_MERGED:
            raise PRMergedException()

        assigned = await self.reviewer_repo.get_assigned_reviewers(pr_id)
        if old_user_id not in assigned:
            raise NotAssignedException()

        old_reviewer = await self.user_repo.get_by_id(old_user_id, load_team=True)
        if not old_reviewer:
            raise NotFoundException("User")

        team = await self.team_repo.get_by_name(old_reviewer.team.team_name)
        if not team:
            raise NotFoundException("Team")

        excluded = set(assigned) | {pr.author_id}
        candidates = [
            member.user_id
            for member in team.members
            if member.is_active and member.user_id not in excluded
        ]
        if not candidates:
            # старый ревьювер остаётся на месте, ничего не меняем
            raise NoCandidateException()

        new_reviewer_id = self.rng.choice(candidates)
        await self.reviewer_repo.reassign_reviewer_atomic(pr_id, old_user_id, new_reviewer_id)
        record_reassignments("manual")

        logger.info(
            "PR %s: reviewer %s replaced by %s", pr_id, old_user_id, new_reviewer_id
        )

        reviewers = await self.reviewer_repo.get_assigned_reviewers(pr_id)
        return {"pr": self._pr_to_schema(pr, reviewers), "replaced_by": new_reviewer_id}

    def _pr_to_schema(self, pr: PullRequest, reviewers: list[str]) -> dict:
        """Преобразовать модель в схему."""
        return {
            "pull_request_id": pr.pull_request_id,
            "pull_request_name": pr.pull_request_name,
            "author_id": pr.author_id,
            "status": pr.status,
            "assigned_reviewers": list(reviewers),
            "need_more_reviewers": bool(pr.need_more_reviewers),
            "createdAt": pr.created_at.isoformat() if pr.created_at else None,
            "mergedAt": pr.merged_at.isoformat() if pr.merged_at else None,
        }

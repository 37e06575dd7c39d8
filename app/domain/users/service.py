"""Сервис для работы с пользователями."""

import logging
import random
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidRequestException, NotFoundException
from app.core.metrics import record_reassignments
from app.db.models import PR_STATUS_OPEN
from app.db.repositories.interfaces import ReviewerStore, TeamStore, UserStore
from app.db.repositories.reviewer_repository import ReviewerRepository
from app.db.repositories.team_repository import TeamRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService
from app.domain.reviewers.planner import OpenPullRequest, build_reassignment_plan

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Сервис для работы с пользователями."""

    def __init__(
        self,
        session: AsyncSession,
        rng: random.Random | None = None,
        *,
        user_repo: UserStore | None = None,
        team_repo: TeamStore | None = None,
        reviewer_repo: ReviewerStore | None = None,
    ):
        super().__init__(session, rng)
        self.user_repo = user_repo or UserRepository(session)
        self.team_repo = team_repo or TeamRepository(session)
        self.reviewer_repo = reviewer_repo or ReviewerRepository(session)

    async def set_is_active(self, user_id: str, is_active: bool) -> dict:
        """Установить флаг активности пользователя."""
        user = await self.user_repo.update_active(user_id, is_active)
        if not user:
            raise NotFoundException("User")

        logger.info("user %s is_active=%s", user_id, is_active)
        return {
            "user": {
                "user_id": user.user_id,
                "username": user.username,
                "team_name": user.team.team_name,
                "is_active": user.is_active,
            }
        }

    async def get_reviews(self, user_id: str) -> dict:
        """Получить PR'ы, где пользователь назначен ревьювером."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundException("User")

        prs = await self.reviewer_repo.get_prs_by_reviewer(user_id)
        return {
            "user_id": user_id,
            "pull_requests": [
                {
                    "pull_request_id": pr.pull_request_id,
                    "pull_request_name": pr.pull_request_name,
                    "author_id": pr.author_id,
                    "status": pr.status,
                }
                for pr in prs
            ],
        }

    async def deactivate_team_members(self, team_name: str, user_ids: List[str]) -> dict:
        """
        Массово деактивировать участников команды.

        Сначала строится и проверяется полный план замены ревьюверов во всех
        открытых PR, и только потом деактивация и план применяются одной транзакцией.
        """
        team = await self.team_repo.get_by_name(team_name, load_members=True)
        if not team:
            raise NotFoundException("Team")

        user_ids = list(dict.fromkeys(user_ids))
        # нельзя деактивировать всех: некому будет ревьюить
        if not user_ids or len(user_ids) >= len(team.members):
            raise InvalidRequestException("cannot deactivate all team members")

        member_ids = {member.user_id for member in team.members}
        for user_id in user_ids:
            if user_id not in member_ids:
                raise InvalidRequestException(
                    f"user {user_id} is not a member of team {team_name}"
                )

        open_prs = await self._get_open_prs_for_users(user_ids)
        reassignments = build_reassignment_plan(open_prs, team.members, user_ids, self.rng)

        deactivated_ids = await self.team_repo.deactivate_team_members(
            team, user_ids, reassignments
        )
        record_reassignments(
            "deactivation", sum(1 for entry in reassignments if entry.new_reviewer_id)
        )

        logger.info(
            "team %s: %d member(s) deactivated, %d reassignment(s)",
            team_name,
            len(deactivated_ids),
            len(reassignments),
        )
        return {
            "deactivated_user_ids": deactivated_ids,
            "reassignments": [entry.model_dump() for entry in reassignments],
        }

    async def _get_open_prs_for_users(self, user_ids: List[str]) -> list[OpenPullRequest]:
        """Собрать открытые PR, где ревьюит хотя бы один из пользователей (без повторов)."""
        open_prs: dict[str, OpenPullRequest] = {}
        for user_id in user_ids:
            for pr in await self.reviewer_repo.get_prs_by_reviewer(user_id):
                if pr.status != PR_STATUS_OPEN or pr.pull_request_id in open_prs:
                    continue
                open_prs[pr.pull_request_id] = OpenPullRequest(
                    pull_request_id=pr.pull_request_id,
                    author_id=pr.author_id,
                    reviewer_ids=await self.reviewer_repo.get_assigned_reviewers(
                        pr.pull_request_id
                    ),
                )
        return list(open_prs.values())

"""Репозиторий для работы с командами."""

import logging
from typing import Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import TeamExistsException
from app.db.models import PR_STATUS_OPEN, PullRequest, Team, User
from app.db.repositories.base import BaseRepository
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.reviewer_repository import ReviewerRepository
from app.schemas.user import ReviewerReassignmentSchema

logger = logging.getLogger(__name__)


class TeamRepository(BaseRepository[Team]):
    """Репозиторий команд."""

    def __init__(self, session: AsyncSession):
        super().__init__(Team, session)

    async def get_by_name(self, team_name: str, load_members: bool = True) -> Optional[Team]:
        """Получить команду по имени."""
        query = select(Team).where(Team.team_name == team_name)
        if load_members:
            query = query.options(selectinload(Team.members)).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, team_name: str) -> bool:
        """Проверить существование команды."""
        result = await self.session.execute(
            select(Team.team_name).where(Team.team_name == team_name)
        )
        return result.scalar_one_or_none() is not None

    async def create_with_members(self, team_name: str, members: list[dict]) -> Team:
        """
        Создать команду и её участников одной транзакцией.
        Существующие пользователи обновляются и переводятся в новую команду.
        """
        try:
            async with self.atomic():
                team = Team(team_name=team_name)
                self.session.add(team)
                await self.session.flush()

                # повтор user_id в запросе: побеждает последняя запись
                members = list({member["user_id"]: member for member in members}.values())
                for member in members:
                    result = await self.session.execute(
                        select(User).where(User.user_id == member["user_id"])
                    )
                    user = result.scalar_one_or_none()
                    if user:
                        user.username = member["username"]
                        user.is_active = member["is_active"]
                        user.team_id = team.id
                    else:
                        self.session.add(
                            User(
                                user_id=member["user_id"],
                                username=member["username"],
                                team_id=team.id,
                                is_active=member["is_active"],
                            )
                        )
        except IntegrityError as exc:
            raise TeamExistsException() from exc

        return await self.get_by_name(team_name)

    async def delete_by_name(self, team_name: str) -> bool:
        """Удалить команду. Участники и их PR удаляются каскадом на уровне БД."""
        team = await self.get_by_name(team_name, load_members=False)
        if not team:
            return False
        async with self.atomic():
            await self.delete(team)
        return True

    async def deactivate_team_members(
        self,
        team: Team,
        user_ids: list[str],
        reassignments: list[ReviewerReassignmentSchema],
    ) -> list[str]:
        """
        Деактивировать участников команды и применить план переназначения ревьюверов.
        Всё выполняется одной транзакцией. Возвращает ID реально деактивированных пользователей.
        """
        reviewer_repo = ReviewerRepository(self.session)
        pr_repo = PRRepository(self.session)

        async with self.atomic():
            result = await self.session.execute(
                select(User.user_id)
                .where(
                    User.team_id == team.id,
                    User.user_id.in_(user_ids),
                    User.is_active.is_(True),
                )
                .order_by(User.user_id)
            )
            deactivated_ids = list(result.scalars().all())

            if deactivated_ids:
                await self.session.execute(
                    update(User)
                    .where(User.team_id == team.id, User.user_id.in_(deactivated_ids))
                    .values(is_active=False)
                    .execution_options(synchronize_session="fetch")
                )

            understaffed_pr_ids = []
            for entry in reassignments:
                await reviewer_repo.remove_reviewer(entry.pr_id, entry.old_reviewer_id)
                if entry.new_reviewer_id:
                    await reviewer_repo.add_reviewers(entry.pr_id, [entry.new_reviewer_id])
                elif entry.pr_id not in understaffed_pr_ids:
                    understaffed_pr_ids.append(entry.pr_id)

            await pr_repo.set_need_more_reviewers(understaffed_pr_ids)

        logger.debug(
            "team %s: deactivated %s, applied %d reassignments",
            team.team_name,
            deactivated_ids,
            len(reassignments),
        )
        return deactivated_ids

    async def get_stats(self) -> list[dict]:
        """Укомплектованность команд: участники, активные, открытые PR авторов команды."""
        members = (
            select(
                User.team_id,
                func.count().label("members"),
                func.sum(case((User.is_active.is_(True), 1), else_=0)).label("active"),
            )
            .group_by(User.team_id)
            .subquery()
        )
        open_prs = (
            select(
                User.team_id,
                func.count().label("open_prs"),
                func.sum(case((PullRequest.need_more_reviewers.is_(True), 1), else_=0)).label(
                    "understaffed"
                ),
            )
            .select_from(PullRequest)
            .join(User, PullRequest.author_id == User.user_id)
            .where(PullRequest.status == PR_STATUS_OPEN)
            .group_by(User.team_id)
            .subquery()
        )

        result = await self.session.execute(
            select(
                Team.team_name,
                func.coalesce(members.c.members, 0).label("members"),
                func.coalesce(members.c.active, 0).label("active"),
                func.coalesce(open_prs.c.open_prs, 0).label("open_prs"),
                func.coalesce(open_prs.c.understaffed, 0).label("understaffed"),
            )
            .outerjoin(members, Team.id == members.c.team_id)
            .outerjoin(open_prs, Team.id == open_prs.c.team_id)
            .order_by(Team.team_name)
        )
        return [
            {
                "team_name": row.team_name,
                "members": int(row.members),
                "active_members": int(row.active),
                "open_prs": int(row.open_prs),
                "understaffed_open_prs": int(row.understaffed),
            }
            for row in result.all()
        ]

"""Репозиторий для работы с пользователями."""

from typing import Optional, List

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models import PR_STATUS_OPEN, PullRequest, Team, User, pr_reviewers
from app.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_id(self, user_id: str, load_team: bool = False) -> Optional[User]:
        """Получить пользователя по ID."""
        query = select(User).where(User.user_id == user_id)
        if load_team:
            query = query.options(selectinload(User.team))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def update_active(self, user_id: str, is_active: bool) -> Optional[User]:
        """Обновить флаг активности."""
        user = await self.get_by_id(user_id, load_team=True)
        if user:
            await self.update(user, is_active=is_active)
        return user

    async def get_stats(self) -> List[dict]:
        """Нагрузка ревьюверов: число назначений всего, в открытых и в смерженных PR."""
        assignments = (
            select(
                pr_reviewers.c.reviewer_id,
                func.count().label("total"),
                func.sum(case((PullRequest.status == PR_STATUS_OPEN, 1), else_=0)).label("open"),
            )
            .join(PullRequest, pr_reviewers.c.pull_request_id == PullRequest.pull_request_id)
            .group_by(pr_reviewers.c.reviewer_id)
            .subquery()
        )

        result = await self.session.execute(
            select(
                User.user_id,
                User.username,
                User.is_active,
                Team.team_name,
                func.coalesce(assignments.c.total, 0).label("total"),
                func.coalesce(assignments.c.open, 0).label("open"),
            )
            .join(Team, User.team_id == Team.id)
            .outerjoin(assignments, User.user_id == assignments.c.reviewer_id)
            .order_by(Team.team_name, User.user_id)
        )
        stats = []
        for row in result.all():
            total, open_count = int(row.total), int(row.open)
            stats.append(
                {
                    "user_id": row.user_id,
                    "username": row.username,
                    "team_name": row.team_name,
                    "is_active": row.is_active,
                    "total_reviews": total,
                    "open_reviews": open_count,
                    "merged_reviews": total - open_count,
                }
            )
        return stats

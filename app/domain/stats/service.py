"""Сводная статистика по ревьюверам, командам и PR."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.interfaces import StatsStore
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.team_repository import TeamRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService


class StatsService(BaseService):
    """Сервис статистики. Читает напрямую из хранилища, без кеша."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        user_repo: StatsStore | None = None,
        team_repo: StatsStore | None = None,
        pr_repo: StatsStore | None = None,
    ):
        super().__init__(session)
        self.user_repo = user_repo or UserRepository(session)
        self.team_repo = team_repo or TeamRepository(session)
        self.pr_repo = pr_repo or PRRepository(session)

    async def get_stats(self) -> dict:
        return {
            "users": await self.user_repo.get_stats(),
            "teams": await self.team_repo.get_stats(),
            "pull_requests": await self.pr_repo.get_stats(),
        }

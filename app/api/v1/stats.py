"""API эндпоинт статистики."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_session
from app.domain.stats.service import StatsService
from app.schemas.stats import StatsResponse

router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(session: AsyncSession = Depends(get_session)):
    """Нагрузка ревьюверов, укомплектованность команд и сводка по PR."""
    return await StatsService(session).get_stats()

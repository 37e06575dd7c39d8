"""API эндпоинты для пользователей."""

import random

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_rng, get_session
from app.domain.users.service import UserService
from app.schemas.user import (
    DeactivateTeamMembersRequest,
    DeactivateTeamMembersResponse,
    GetReviewsResponse,
    SetIsActiveRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/setIsActive", response_model=UserResponse)
async def set_is_active(
    request: SetIsActiveRequest,
    session: AsyncSession = Depends(get_session),
):
    """Установить флаг активности пользователя."""
    return await UserService(session).set_is_active(request.user_id, request.is_active)


@router.get("/getReview", response_model=GetReviewsResponse)
async def get_reviews(
    user_id: str,
    session: AsyncSession = Depends(get_session),
):
    """Получить PR'ы, где пользователь назначен ревьювером."""
    return await UserService(session).get_reviews(user_id)


@router.post("/deactivateTeamMembers", response_model=DeactivateTeamMembersResponse)
async def deactivate_team_members(
    request: DeactivateTeamMembersRequest,
    session: AsyncSession = Depends(get_session),
    rng: random.Random = Depends(get_rng),
):
    """Массово деактивировать участников команды и переназначить их открытые PR."""
    return await UserService(session, rng).deactivate_team_members(
        request.team_name, request.user_ids
    )

"""Схемы для пользователей."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from app.schemas.pr import PullRequestShortSchema


class UserSchema(BaseModel):
    """Схема пользователя."""

    user_id: str
    username: str
    team_name: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Ответ с пользователем."""

    user: UserSchema


class SetIsActiveRequest(BaseModel):
    """Запрос на установку флага активности."""

    user_id: str = Field(min_length=1)
    is_active: bool


class GetReviewsResponse(BaseModel):
    """Ответ со списком PR'ов пользователя."""

    user_id: str
    pull_requests: list["PullRequestShortSchema"]

    model_config = ConfigDict(from_attributes=True)


class ReviewerReassignmentSchema(BaseModel):
    """
    Элемент плана переназначения.
    Пустой new_reviewer_id означает снятие ревьювера без замены.
    """

    pr_id: str
    old_reviewer_id: str
    new_reviewer_id: str = ""


class DeactivateTeamMembersRequest(BaseModel):
    """Запрос на массовую деактивацию участников команды."""

    team_name: str = Field(min_length=1)
    user_ids: List[str]


class DeactivateTeamMembersResponse(BaseModel):
    """Ответ на массовую деактивацию."""

    deactivated_user_ids: List[str]
    reassignments: List[ReviewerReassignmentSchema]


UserResponse.model_rebuild()
GetReviewsResponse.model_rebuild()

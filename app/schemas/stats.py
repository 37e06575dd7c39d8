"""Схемы для статистики."""

from pydantic import BaseModel


class ReviewerLoadSchema(BaseModel):
    """Нагрузка ревьювера."""

    user_id: str
    username: str
    team_name: str
    is_active: bool
    total_reviews: int
    open_reviews: int
    merged_reviews: int


class TeamStaffingSchema(BaseModel):
    """Укомплектованность команды."""

    team_name: str
    members: int
    active_members: int
    open_prs: int
    understaffed_open_prs: int


class PRStatsSchema(BaseModel):
    total_prs: int
    open_prs: int
    merged_prs: int
    need_more_reviewers_prs: int
    prs_with_0_reviewers: int
    prs_with_1_reviewer: int
    prs_with_2_reviewers: int


class StatsResponse(BaseModel):
    """Ответ со статистикой."""

    users: list[ReviewerLoadSchema]
    teams: list[TeamStaffingSchema]
    pull_requests: PRStatsSchema

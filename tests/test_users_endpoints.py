"""Тесты для сервиса пользователей."""

import pytest

from app.core.exceptions import (
    InvalidRequestException,
    NoCandidateException,
    NotFoundException,
)
from app.domain.pull_requests.service import PullRequestService
from app.domain.teams.service import TeamService
from app.domain.users.service import UserService


async def create_trio(session, rng):
    """Команда из трёх человек и PR от s1 с ревьюверами s2 и s3."""
    await TeamService(session).create_team(
        "trio",
        [
            {"user_id": "s1", "username": "Small 1", "is_active": True},
            {"user_id": "s2", "username": "Small 2", "is_active": True},
            {"user_id": "s3", "username": "Small 3", "is_active": True},
        ],
    )
    await PullRequestService(session, rng).create_pr("pr-t", "Trio PR", "s1")


def active_flags(team_result: dict) -> dict:
    return {m["user_id"]: m["is_active"] for m in team_result["team"]["members"]}


@pytest.mark.asyncio
async def test_set_user_active(session, sample_team):
    """Тест установки флага активности пользователя."""
    service = UserService(session)
    result = await service.set_is_active("u1", False)
    assert result["user"] == {
        "user_id": "u1",
        "username": "Alice",
        "team_name": "backend",
        "is_active": False,
    }


@pytest.mark.asyncio
async def test_set_nonexistent_user_active(session):
    """Тест установки флага активности несуществующего пользователя."""
    service = UserService(session)
    with pytest.raises(NotFoundException):
        await service.set_is_active("nonexistent", False)


@pytest.mark.asyncio
async def test_get_reviews(session, sample_team, rng):
    """Тест получения PR'ов пользователя."""
    pr_service = PullRequestService(session, rng)
    created = await pr_service.create_pr("pr-1", "Test PR", "u1")
    reviewer = created["pr"]["assigned_reviewers"][0]

    user_service = UserService(session)
    result = await user_service.get_reviews(reviewer)
    assert result["user_id"] == reviewer
    assert result["pull_requests"] == [
        {
            "pull_request_id": "pr-1",
            "pull_request_name": "Test PR",
            "author_id": "u1",
            "status": "OPEN",
        }
    ]

    # автор сам себя не ревьюит
    assert (await user_service.get_reviews("u1"))["pull_requests"] == []


@pytest.mark.asyncio
async def test_get_reviews_unknown_user(session):
    with pytest.raises(NotFoundException):
        await UserService(session).get_reviews("ghost")


@pytest.mark.asyncio
async def test_deactivate_with_replacement(session, sample_team, rng):
    """Деактивированный ревьювер заменяется свободным участником команды."""
    created = await PullRequestService(session, rng).create_pr("pr-1", "Test PR", "u1")
    assigned = created["pr"]["assigned_reviewers"]
    leaving, staying = assigned
    (free,) = {"u2", "u3", "u4"} - set(assigned)

    result = await UserService(session, rng).deactivate_team_members("backend", [leaving])
    assert result["deactivated_user_ids"] == [leaving]
    assert result["reassignments"] == [
        {"pr_id": "pr-1", "old_reviewer_id": leaving, "new_reviewer_id": free}
    ]

    pr = (await PullRequestService(session).get_pr("pr-1"))["pr"]
    assert sorted(pr["assigned_reviewers"]) == sorted([staying, free])
    assert pr["need_more_reviewers"] is False

    team = await TeamService(session).get_team("backend")
    assert active_flags(team)[leaving] is False


@pytest.mark.asyncio
async def test_deactivate_removes_reviewer_without_replacement(session, rng):
    """Нет замены, но у PR остаётся ревьювер: снимаем и помечаем PR."""
    await create_trio(session, rng)

    result = await UserService(session, rng).deactivate_team_members("trio", ["s2"])
    assert result["deactivated_user_ids"] == ["s2"]
    assert result["reassignments"] == [
        {"pr_id": "pr-t", "old_reviewer_id": "s2", "new_reviewer_id": ""}
    ]

    pr = (await PullRequestService(session).get_pr("pr-t"))["pr"]
    assert pr["assigned_reviewers"] == ["s3"]
    assert pr["need_more_reviewers"] is True


@pytest.mark.asyncio
async def test_deactivate_rejected_when_pr_left_without_reviewers(session, rng):
    """PR остался бы без ревьюверов: NO_CANDIDATE и никаких изменений."""
    await create_trio(session, rng)

    with pytest.raises(NoCandidateException) as exc_info:
        await UserService(session, rng).deactivate_team_members("trio", ["s2", "s3"])
    assert exc_info.value.status_code == 400
    assert exc_info.value.code == "NO_CANDIDATE"

    pr = (await PullRequestService(session).get_pr("pr-t"))["pr"]
    assert sorted(pr["assigned_reviewers"]) == ["s2", "s3"]
    team = await TeamService(session).get_team("trio")
    assert all(active_flags(team).values())


@pytest.mark.asyncio
async def test_deactivate_ignores_merged_prs(session, sample_team, rng):
    """Назначения в MERGED PR не трогаются."""
    pr_service = PullRequestService(session, rng)
    created = await pr_service.create_pr("pr-1", "Test PR", "u1")
    await pr_service.merge_pr("pr-1")
    leaving = created["pr"]["assigned_reviewers"][0]

    result = await UserService(session, rng).deactivate_team_members("backend", [leaving])
    assert result["reassignments"] == []
    pr = (await pr_service.get_pr("pr-1"))["pr"]
    assert leaving in pr["assigned_reviewers"]


@pytest.mark.asyncio
async def test_deactivate_collapses_duplicate_ids(session, sample_team, rng):
    result = await UserService(session, rng).deactivate_team_members("backend", ["u4", "u4"])
    assert result == {"deactivated_user_ids": ["u4"], "reassignments": []}


@pytest.mark.asyncio
async def test_deactivate_all_members(session, sample_team):
    """Нельзя деактивировать всю команду."""
    service = UserService(session)
    with pytest.raises(InvalidRequestException):
        await service.deactivate_team_members("backend", ["u1", "u2", "u3", "u4"])
    with pytest.raises(InvalidRequestException):
        await service.deactivate_team_members("backend", [])


@pytest.mark.asyncio
async def test_deactivate_non_member(session, sample_team):
    """Пользователь не из команды."""
    with pytest.raises(InvalidRequestException) as exc_info:
        await UserService(session).deactivate_team_members("backend", ["u1", "ghost"])
    assert "ghost" in exc_info.value.message


@pytest.mark.asyncio
async def test_deactivate_unknown_team(session):
    with pytest.raises(NotFoundException):
        await UserService(session).deactivate_team_members("nobody", ["u1"])

"""Планирование переназначений при массовой деактивации участников команды."""

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable

from fastapi import status

from app.core.exceptions import NoCandidateException
from app.domain.reviewers.selection import Member, select_reviewers
from app.schemas.user import ReviewerReassignmentSchema

logger = logging.getLogger(__name__)


@dataclass
class OpenPullRequest:
    """Снимок открытого PR, достаточный для планирования."""

    pull_request_id: str
    author_id: str
    reviewer_ids: list[str] = field(default_factory=list)


def build_reassignment_plan(
    open_prs: Iterable[OpenPullRequest],
    team_members: Iterable[Member],
    user_ids_to_deactivate: Iterable[str],
    rng: random.Random,
) -> list[ReviewerReassignmentSchema]:
    """
    Построить полный план замены деактивируемых ревьюверов.

    Замены берутся только из участников, которые останутся в команде: активных,
    не автора PR и не назначенных на этот PR. Ревьюверы, которым не хватило
    кандидата, снимаются без замены. Если хоть один PR остаётся совсем без
    ревьюверов, весь план отклоняется с NoCandidateException до каких-либо записей.

    Уже назначенные на PR исключаются из пула до выборки, а не после неё:
    так выборка не тратит место на заведомо неподходящих кандидатов.
    """
    deactivating = set(user_ids_to_deactivate)
    available_members = [m for m in team_members if m.user_id not in deactivating]

    plan: list[ReviewerReassignmentSchema] = []
    for pr in open_prs:
        reviewers_to_replace = [r for r in pr.reviewer_ids if r in deactivating]
        if not reviewers_to_replace:
            continue

        already_assigned = set(pr.reviewer_ids)
        pool = [m for m in available_members if m.user_id not in already_assigned]
        candidates = select_reviewers(pool, pr.author_id, len(reviewers_to_replace), rng)

        added = 0
        for index, old_reviewer_id in enumerate(reviewers_to_replace):
            new_reviewer_id = candidates[index] if index < len(candidates) else ""
            if new_reviewer_id:
                added += 1
            plan.append(
                ReviewerReassignmentSchema(
                    pr_id=pr.pull_request_id,
                    old_reviewer_id=old_reviewer_id,
                    new_reviewer_id=new_reviewer_id,
                )
            )

        final_reviewer_count = len(pr.reviewer_ids) - len(reviewers_to_replace) + added
        if final_reviewer_count == 0:
            logger.warning(
                "deactivation rejected: PR %s would be left without reviewers",
                pr.pull_request_id,
            )
            raise NoCandidateException(
                f"cannot deactivate reviewers: PR {pr.pull_request_id} "
                "would be left without reviewers",
                status.HTTP_400_BAD_REQUEST,
            )

    return plan

"""Выбор ревьюверов из состава команды."""

import random
from typing import Iterable, Protocol

# Целевое число ревьюверов на PR
MAX_REVIEWERS_COUNT = 2


class Member(Protocol):
    user_id: str
    is_active: bool


def select_reviewers(
    members: Iterable[Member],
    exclude_user_id: str | None,
    max_count: int,
    rng: random.Random,
) -> list[str]:
    """
    Выбрать до max_count ревьюверов.

    Кандидаты: активные участники, кроме exclude_user_id (обычно автор PR).
    Если кандидатов не больше max_count, возвращаются все в исходном порядке,
    иначе равновероятная выборка без повторений из переданного генератора.
    """
    if max_count <= 0:
        return []

    candidates = []
    for member in members:
        if member.is_active and member.user_id != exclude_user_id:
            if member.user_id not in candidates:
                candidates.append(member.user_id)

    if len(candidates) <= max_count:
        return candidates

    return rng.sample(candidates, max_count)

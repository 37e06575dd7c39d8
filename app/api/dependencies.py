"""Зависимости для API."""

import random

from app.core.database import get_db


async def get_session():
    """Получить сессию БД (транзакция на запрос)."""
    async for session in get_db():
        yield session


def get_rng() -> random.Random:
    """Свой генератор на каждый запрос для выбора ревьюверов."""
    return random.Random()

"""Базовый класс для сервисов."""

import random

from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """Базовый класс для всех сервисов."""

    def __init__(self, session: AsyncSession, rng: random.Random | None = None):
        self.session = session
        # генератор локален для сервиса (а значит и для запроса)
        self.rng = rng or random.Random()

"""Базовый репозиторий."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Атомарная группа изменений.
    Все операции внутри блока сбрасываются одним flush; при любой ошибке
    транзакция сессии откатывается целиком, и исключение пробрасывается дальше.
    """
    try:
        yield session
        await session.flush()
    except Exception:
        await session.rollback()
        raise


class BaseRepository(Generic[ModelType]):
    """Базовый репозиторий для работы с БД."""

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get_by_id(self, id: str) -> ModelType | None:
        """Получить по ID (переопределяется в дочерних классах)."""
        raise NotImplementedError("Subclasses must implement get_by_id")

    def atomic(self):
        """Атомарная группа изменений в сессии репозитория."""
        return atomic(self.session)

    async def update(self, instance: ModelType, **kwargs) -> ModelType:
        """Обновить запись."""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        await self.session.flush()
        return instance

    async def delete(self, instance: ModelType):
        """Удалить запись."""
        await self.session.delete(instance)
        await self.session.flush()

"""Конфигурация тестов."""

import random

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_session
from app.core.database import Base, enable_sqlite_foreign_keys
from app.db.models import Team, User
from app.main import app


@pytest.fixture(scope="function")
async def test_db():
    """Создать тестовую БД в памяти."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_session_maker

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def session(test_db):
    """Создать сессию БД для теста."""
    async with test_db() as session:
        yield session


@pytest.fixture
def rng():
    """Детерминированный генератор для выбора ревьюверов."""
    return random.Random(42)


@pytest.fixture
async def sample_team(session):
    """Создать тестовую команду."""
    team = Team(team_name="backend")
    session.add(team)
    await session.flush()

    users = [
        User(user_id="u1", username="Alice", team_id=team.id, is_active=True),
        User(user_id="u2", username="Bob", team_id=team.id, is_active=True),
        User(user_id="u3", username="Charlie", team_id=team.id, is_active=True),
        User(user_id="u4", username="Dave", team_id=team.id, is_active=True),
    ]
    for user in users:
        session.add(user)

    await session.commit()
    return team


@pytest.fixture
async def client(test_db):
    """HTTP клиент приложения: отдельная сессия и транзакция на каждый запрос."""

    async def override_get_session():
        async with test_db() as request_session:
            try:
                yield request_session
                await request_session.commit()
            except Exception:
                await request_session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

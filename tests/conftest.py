"""Pytest fixtures for unit and integration tests."""
from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from project50.api.v1.deps import get_session_factory
from project50.database import get_db
from project50.main import app
from project50.models.base import Base
from project50.schemas.progress import Badge, DayData, Habit, Progress
from project50.services.storage_service import LocalProgressStore, get_local_store
from project50.services.xp_service import level_for_xp

# Use in-memory SQLite for tests (aiomysql requires MariaDB)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

NOW = datetime(2026, 3, 1, 9, 0, 0)

HABITS = [
    Habit(id="wake_up", label="Wake up early"),
    Habit(id="exercise", label="Exercise"),
    Habit(id="reading", label="Read 10 pages"),
]


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(tmp_path) -> LocalProgressStore:
    return LocalProgressStore(tmp_path / "progress", quota_kb=5120)


@pytest_asyncio.fixture
async def client(session_factory, store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with DB, local store and sync session overrides."""

    async def _get_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_local_store] = lambda: store
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_progress():
    """Build a Progress over HABITS.

    ``complete`` days have every habit done, ``partial`` days have one habit
    done, ``frozen`` days are frozen with nothing done.
    """

    def _make(
        *,
        current_day: int = 1,
        total_days: int = 50,
        complete=(),
        partial=(),
        frozen=(),
        xp: int = 0,
        strict_mode: bool = False,
        streak_freezes: int = 0,
        badges=(),
        habits=None,
        updated_at=None,
    ) -> Progress:
        habits = list(habits or HABITS)
        all_ids = [h.id for h in habits]
        history = {}
        for day in complete:
            history[day] = DayData(date=f"day-{day}", completed_habits=all_ids)
        for day in partial:
            history[day] = DayData(date=f"day-{day}", completed_habits=all_ids[:1])
        for day in frozen:
            history[day] = DayData(date=f"day-{day}", frozen=True, freeze_reason="manual")
        return Progress(
            current_day=current_day,
            total_days=total_days,
            start_date=NOW,
            history=history,
            custom_habits=habits,
            xp=xp,
            level=level_for_xp(xp),
            strict_mode=strict_mode,
            streak_freezes=streak_freezes,
            badges=[Badge(id=b, unlocked_at=NOW) for b in badges],
            updated_at=updated_at,
        )

    return _make

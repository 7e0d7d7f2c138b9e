"""
Pytest fixtures shared by the game storage tests.

Provides:
- a fresh SQLite database per test (file based, so concurrent sessions really
  compete for the write lock)
- registered teams RED, BLU and GRN
- a fake match notifier that records every announcement
"""

import asyncio
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from game_storage.create_sqlite_engine import create_sqlite_engine
from game_storage.models.schemas import Base
from game_storage.register_team import register_team
from game_storage.services.game_lifecycle import GameLifecycle

NOW = datetime(2026, 10, 18, 12, 0, 0)
IN_TWO_HOURS = NOW + timedelta(hours=2)


class FakeNotifier:
    """Stands in for MatchNotifier; answers from `outcomes`, then accepts.

    With `release` set, every announcement waits for that event first.
    """

    def __init__(self, outcomes=None, delay: float = 0.0, release: asyncio.Event | None = None):
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.release = release
        self.calls = []

    async def announce_start(self, start_game) -> bool:
        self.calls.append(start_game)
        if self.release is not None:
            await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.outcomes:
            return self.outcomes.pop(0)
        return True

    async def close(self) -> None:
        pass


async def wait_for_announcement(notifier: FakeNotifier, count: int = 1) -> None:
    while len(notifier.calls) < count:
        await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_sqlite_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'games.sqlite3'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def Session(engine):
    return async_sessionmaker(autocommit=False, class_=AsyncSession, bind=engine)


@pytest_asyncio.fixture
async def teams(Session):
    return {
        code: await register_team(code, name, Session)
        for code, name in [("RED", "Red Team"), ("BLU", "Blue Team"), ("GRN", "Green Team")]
    }


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def lifecycle(Session, notifier, teams):
    return GameLifecycle(Session, notifier, clock=lambda: NOW)

"""
Shared fixtures for the SaiyanBot test suite.

- Controllable millisecond clock
- Seeded random source
- ProgressionStore / LevelingSystem over tmp_path
- SQLite settings database over tmp_path
"""

import random
from datetime import datetime

import pytest
import pytest_asyncio

from database import Database, ProgressionStore
from modules.leveling import LevelingSystem


def local_ms(*args) -> int:
    """Epoch milliseconds for a naive local datetime."""
    return int(datetime(*args).timestamp() * 1000)


class FakeClock:
    """Callable clock returning epoch milliseconds, advanced by hand."""

    def __init__(self, start: int):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


@pytest.fixture
def clock():
    # Wednesday 2024-01-03 12:00 local time
    return FakeClock(local_ms(2024, 1, 3, 12, 0))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest_asyncio.fixture
async def store(tmp_path, clock):
    store = ProgressionStore(tmp_path / "user-levels.json", clock=clock)
    await store.initialize()
    return store


@pytest.fixture
def leveling(store, clock, rng):
    return LevelingSystem(store, clock=clock, rng=rng)


@pytest.fixture
def fixed_roll(leveling, monkeypatch):
    """Pin the random XP bonus to 0 so awards are exact."""
    monkeypatch.setattr(leveling.rng, "randrange", lambda n: 0)
    return leveling


@pytest_asyncio.fixture
async def settings_db(tmp_path):
    db = Database(str(tmp_path / "settings.db"))
    await db.initialize()
    yield db
    await db.close()

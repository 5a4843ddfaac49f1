"""Pytest configuration and fixtures."""
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from timebill.database import Database
from timebill.main import app
from timebill.utils.clock import FrozenClock


@pytest.fixture
def clock():
    """Clock frozen at 2025-03-10 09:00 UTC, advanced explicitly by tests."""
    return FrozenClock(datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def db(clock):
    """Fresh, connected arena driven by the test clock."""
    arena = Database(clock=clock)
    await arena.connect()
    yield arena
    await arena.disconnect()


@pytest_asyncio.fixture
async def app_client(clock):
    """
    Create a test client with a clean arena.

    This fixture:
    - Resets the global arena and points it at the test clock
    - Yields an async HTTP client for testing
    - Disconnects the arena after each test
    """
    from timebill.database import database

    original_clock = database.clock
    database.clock = clock
    await database.connect()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    await database.disconnect()
    database.clock = original_clock

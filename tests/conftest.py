"""
Shared fixtures: an in-memory SQLite database per test and an HTTP client
bound to it.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import time

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tutor_availability.core.database import get_db, init_db
from tutor_availability.main import app
from tutor_availability.models import Profile, ProfileRole, TutorAvailability


def _memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest_asyncio.fixture
async def engine():
    engine = _memory_engine()
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tutor(db):
    """A tutor in New York with Monday and Wednesday mornings open."""
    profile = Profile(id="tutor-1", email="tutor@example.com", name="Ada", role=ProfileRole.TUTOR)
    db.add(profile)
    db.add_all([
        TutorAvailability(tutor_id="tutor-1", day_of_week=3, start_time=time(9, 0), end_time=time(10, 0),
                          timezone="America/New_York"),
        TutorAvailability(tutor_id="tutor-1", day_of_week=1, start_time=time(13, 0), end_time=time(14, 0),
                          timezone="America/New_York"),
        TutorAvailability(tutor_id="tutor-1", day_of_week=1, start_time=time(9, 0), end_time=time(10, 0),
                          timezone="America/New_York"),
        TutorAvailability(tutor_id="tutor-1", day_of_week=2, start_time=time(9, 0), end_time=time(12, 0),
                          timezone="America/New_York", is_active=False),
    ])
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def everyday_tutor(db):
    """A UTC tutor open 09:00-10:00 every day of the week."""
    profile = Profile(id="tutor-2", email="daily@example.com", name="Grace", role=ProfileRole.TUTOR)
    db.add(profile)
    db.add_all([
        TutorAvailability(tutor_id="tutor-2", day_of_week=day, start_time=time(9, 0), end_time=time(10, 0),
                          timezone="UTC")
        for day in range(7)
    ])
    await db.commit()
    return profile


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def broken_engine():
    """An engine whose database has no tables, so every query fails."""
    engine = _memory_engine()
    yield engine
    await engine.dispose()

"""
Pytest fixtures for test database, client, and seeded events.

Each test gets a fresh database (in-memory SQLite by default, override with
TEST_DATABASE_URL) with tables created up front and dropped afterwards.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.gateway import SqlAlchemyGateway
from app.db.session import get_db
from app.models.event import Event
from app.services.cache_service import EventListCache

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def event_fields(**overrides) -> dict:
    """A complete, valid Event payload in raw (un-normalized) form."""
    fields = {
        "title": "PyCon Berlin 2027",
        "description": "Three days of talks about Python.",
        "overview": "Talks, tutorials and sprints.",
        "image": "/images/pycon.png",
        "venue": "bcc Berlin",
        "location": "Berlin, Germany",
        "date": "2027-04-15",
        "time": "9:30 AM",
        "mode": "offline",
        "audience": "Developers",
        "agenda": ["Registration", "Keynote", "Lightning talks"],
        "organizer": "Python Software Verband",
        "tags": ["Python", "Conference"],
    }
    fields.update(overrides)
    return fields


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    kwargs = {}
    if make_url(TEST_DATABASE_URL).get_backend_name() == "sqlite":
        # One shared connection keeps the in-memory database alive
        kwargs["poolclass"] = StaticPool
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def gateway(db_session: AsyncSession) -> SqlAlchemyGateway:
    return SqlAlchemyGateway(db_session)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # ASGITransport does not run the lifespan, so the cache handle is set here
    app.state.cache = EventListCache("redis://unused", ttl=60, enabled=False)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    """A stored event in canonical form."""
    event = Event(
        title="Test Concert",
        slug="test-concert",
        description="A test event",
        overview="An evening of music",
        image="/images/concert.png",
        venue="Test Venue",
        location="Test City",
        date="2027-06-01",
        time="19:00",
        mode="offline",
        audience="Everyone",
        agenda=["Doors", "Show"],
        organizer="Test Org",
        tags=["music", "live"],
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event

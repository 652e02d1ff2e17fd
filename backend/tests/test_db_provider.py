"""
Tests for the database-handle provider lifecycle.
"""

import asyncio

import pytest
from sqlalchemy import text

from app.db import session as session_module
from app.db.session import DatabaseProvider


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'provider.db'}"


@pytest.fixture
def engine_calls(monkeypatch):
    calls = []
    real_create = session_module.create_async_engine

    def counting_create(url, **kwargs):
        calls.append(url)
        return real_create(url, **kwargs)

    monkeypatch.setattr(session_module, "create_async_engine", counting_create)
    return calls


@pytest.mark.asyncio
async def test_session_before_initialize_raises(db_url):
    provider = DatabaseProvider(db_url)
    assert not provider.is_initialized

    with pytest.raises(RuntimeError):
        async with provider.session():
            pass


@pytest.mark.asyncio
async def test_connects_once_and_reuses(db_url, engine_calls):
    provider = DatabaseProvider(db_url)

    first = await provider.initialize()
    second = await provider.initialize()

    assert first is second
    assert len(engine_calls) == 1

    async with provider.session() as session:
        assert (await session.execute(text("SELECT 1"))).scalar() == 1

    await provider.shutdown()


@pytest.mark.asyncio
async def test_concurrent_initialize_shares_one_engine(db_url, engine_calls):
    provider = DatabaseProvider(db_url)

    engines = await asyncio.gather(*(provider.initialize() for _ in range(5)))

    assert all(engine is engines[0] for engine in engines)
    assert len(engine_calls) == 1
    await provider.shutdown()


@pytest.mark.asyncio
async def test_failed_connect_resets_and_retries(tmp_path, db_url, engine_calls):
    provider = DatabaseProvider(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}")

    with pytest.raises(Exception):
        await provider.initialize()
    assert not provider.is_initialized

    provider.url = db_url
    engine = await provider.initialize()

    assert provider.is_initialized
    assert provider.engine is engine
    assert len(engine_calls) == 2
    await provider.shutdown()


@pytest.mark.asyncio
async def test_shutdown_releases_engine(db_url, engine_calls):
    provider = DatabaseProvider(db_url)
    await provider.initialize()

    await provider.shutdown()

    assert not provider.is_initialized
    with pytest.raises(RuntimeError):
        provider.engine

    await provider.initialize()
    assert len(engine_calls) == 2
    await provider.shutdown()


def test_pool_settings_only_for_server_databases():
    sqlite = DatabaseProvider("sqlite+aiosqlite:///:memory:", pool_size=3)
    postgres = DatabaseProvider("postgresql+asyncpg://u:p@localhost/db", pool_size=3)

    assert "pool_size" not in sqlite._engine_kwargs
    assert postgres._engine_kwargs["pool_size"] == 3

'''
Pytest configuration.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. Ready-made grid configs, engines and a recording fake repository.
3. A fresh SQLite database (through aiosqlite) per test for repository tests.
4. A FastAPI TestClient whose app lifespan runs against its own SQLite file.
'''
import os

# Must be set before the settings object is created on import
os.environ["TEST_MODE"] = "True"
os.environ.setdefault("DATABASE_URL_PROD", "sqlite+aiosqlite:///./smart_calendar_prod.db")
os.environ.setdefault("DATABASE_URL_TEST", "sqlite+aiosqlite:///./smart_calendar_test.db")

import pytest
from typing import AsyncGenerator
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from smart_calendar_backend.main import app
from smart_calendar_backend.common.config import settings
from smart_calendar_backend.database import engine as db_engine
from smart_calendar_backend.database.models import Base
from smart_calendar_backend.models.schedule import GridConfig
from smart_calendar_backend.models.labels import Label
from smart_calendar_backend.services.schedule_engine import ScheduleEngine
from smart_calendar_backend.services.schedule_repository import ScheduleRepository

from tests.constants import TEST_USER_ID, WORK, REST


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Forces the anyio plugin onto asyncio and shares one runner for the session.
    """
    return "asyncio"


# --- 1. Grid & Engine Fixtures ---

@pytest.fixture(scope="function")
def grid_config() -> GridConfig:
    """05:00 - 21:00 in 30-minute slots: window_start=300, 32 slots."""
    return GridConfig(start_hour=5, end_hour=21, step_minutes=30)


@pytest.fixture(scope="function")
def work_label() -> Label:
    return Label(id=WORK, name="Work", color="#10B981", open_tabs=["global", "instance"])


@pytest.fixture(scope="function")
def rest_label() -> Label:
    return Label(id=REST, name="Rest", color="#3B82F6", open_tabs=["global", "instance"])


@pytest.fixture(scope="function")
def schedule_engine(grid_config: GridConfig, work_label: Label, rest_label: Label) -> ScheduleEngine:
    """A CLEAN engine with nothing painted and the WORK/REST labels already saved."""
    engine = ScheduleEngine(TEST_USER_ID, config=grid_config)
    engine._labels = {WORK: work_label, REST: rest_label}
    engine._rematerialize()
    return engine


@pytest.fixture(scope="function")
def fake_repository() -> AsyncMock:
    """
    A repository double: every write is an AsyncMock, reads return nothing.
    `repository.calls` records the writes in the order they were made.
    """
    repository = AsyncMock(spec=ScheduleRepository)
    calls = []

    def record(name):
        async def _record(*args, **kwargs):
            calls.append((name, args))
        return _record

    for name in [
        "replace_schedule_entries", "replace_instance_notes", "upsert_instance_note",
        "delete_instance_note", "upsert_calendar_config", "upsert_label", "delete_label",
        "commit", "rollback",
    ]:
        getattr(repository, name).side_effect = record(name)

    repository.fetch_config.return_value = None
    repository.fetch_blocks.return_value = []
    repository.fetch_notes.return_value = {}
    repository.fetch_labels.return_value = []
    repository.calls = calls
    return repository


# --- 2. Database Fixtures (repository tests) ---

@pytest.fixture(scope="function")
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """
    A session on a brand new SQLite file with every table created.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'repository.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest.fixture(scope="function")
def schedule_repository(db_session: AsyncSession) -> ScheduleRepository:
    return ScheduleRepository(db=db_session)


# --- 3. API Fixtures ---

async def _create_tables():
    async with db_engine.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(scope="function")
def client(tmp_path, monkeypatch) -> TestClient:
    """
    1. Points the test database URL at a fresh SQLite file.
    2. Runs the app's lifespan, which creates the engine and the session registry.
    3. Creates the tables inside the app's own event loop.
    """
    monkeypatch.setattr(settings, "DATABASE_URL_TEST", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    assert settings.TEST_MODE is True, \
        "TEST_MODE was not set to True! Check your environment."

    with TestClient(app) as test_client:
        test_client.portal.call(_create_tables)
        yield test_client
        # TEST_MODE skips disposal in the lifespan, so do it here
        test_client.portal.call(db_engine.dispose_db_engine)


@pytest.fixture(scope="function")
def user_headers() -> dict[str, str]:
    return {"X-User-Id": str(TEST_USER_ID)}

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pytest import MonkeyPatch
from sqlmodel import SQLModel

from taskapi.core.config import get_settings
from taskapi.db.engine import create_engine_from_url, dispose_engine
from taskapi.main import create_app
from taskapi.services import TaskService
from tests.shared import ApiTestContext, InMemoryTaskStore, to_sqlite_url


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def service(store: InMemoryTaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture
def api_context(tmp_path: Path, monkeypatch: MonkeyPatch) -> Iterator[ApiTestContext]:
    """
    Creates a temporary SQLite database and a test client.
    Requests act as user 1 unless they send other_headers (user 2).
    """
    db_url = to_sqlite_url(tmp_path / "api-integration.db")
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.delenv("LOCAL_API_KEY", raising=False)
    get_settings.cache_clear()
    dispose_engine()

    engine = create_engine_from_url(db_url)
    SQLModel.metadata.create_all(engine)

    with TestClient(create_app()) as client:
        yield ApiTestContext(client=client, engine=engine, user_id=1, other_user_id=2)

    engine.dispose()
    dispose_engine()
    get_settings.cache_clear()

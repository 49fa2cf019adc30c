from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog
from fastapi.testclient import TestClient

from taskapi.core.logging import TRACE_ID_MAX_LENGTH, bind_log_context, clear_log_context
from tests.shared import ApiTestContext


@pytest.fixture(autouse=True)
def _isolated_log_context() -> Iterator[None]:
    clear_log_context()
    yield
    clear_log_context()


def test_bind_log_context_skips_missing_identifiers() -> None:
    bind_log_context(trace_id="trace-1", user_id=None, task_id=7)

    assert structlog.contextvars.get_contextvars() == {"trace_id": "trace-1", "task_id": 7}


def test_clear_log_context_drops_bound_identifiers() -> None:
    bind_log_context(user_id=3)
    clear_log_context()

    assert structlog.contextvars.get_contextvars() == {}


def test_oversized_trace_header_is_truncated(api_context: ApiTestContext) -> None:
    client: TestClient = api_context.client
    response = client.get("/healthz", headers={"X-Trace-ID": "t" * (TRACE_ID_MAX_LENGTH + 50)})

    assert response.headers["X-Trace-ID"] == "t" * TRACE_ID_MAX_LENGTH

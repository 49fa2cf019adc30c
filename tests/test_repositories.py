from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlmodel import Session

from taskapi.db.bootstrap import initialize_database
from taskapi.db.engine import create_engine_from_url
from taskapi.db.models import Task
from taskapi.db.repositories import RecordNotFoundError, TaskFilters, TaskRepository
from tests.shared import to_sqlite_url


@pytest.fixture
def session(tmp_path: Path) -> Iterator[Session]:
    db_url = to_sqlite_url(tmp_path / "task-repository.db")
    initialize_database(database_url=db_url)

    engine = create_engine_from_url(db_url)
    try:
        with Session(engine) as db_session:
            yield db_session
    finally:
        engine.dispose()


def test_task_repository_create_assigns_id_and_timestamps(session: Session) -> None:
    repository = TaskRepository(session)

    task = repository.create(Task(user_id=1, title="Buy milk"))

    assert task.id is not None
    assert task.completed is False
    assert task.created_at is not None
    assert task.updated_at is not None


def test_task_repository_get_is_scoped_by_owner(session: Session) -> None:
    repository = TaskRepository(session)
    task = repository.create(Task(user_id=1, title="Private"))
    assert task.id is not None

    assert repository.get(task_id=task.id, user_id=1) is not None
    assert repository.get(task_id=task.id, user_id=2) is None
    assert repository.get(task_id=task.id + 1000, user_id=1) is None


def test_task_repository_list_filters_and_orders_newest_first(session: Session) -> None:
    base = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)
    session.add(Task(user_id=1, title="Old done", completed=True, priority="high", created_at=base))
    session.add(
        Task(
            user_id=1,
            title="New done",
            completed=True,
            priority="high",
            created_at=base + timedelta(days=2),
        )
    )
    session.add(
        Task(
            user_id=1,
            title="Open low",
            completed=False,
            priority="low",
            created_at=base + timedelta(days=1),
        )
    )
    session.add(Task(user_id=2, title="Foreign", completed=True, priority="high", created_at=base))
    session.commit()

    repository = TaskRepository(session)

    everything = repository.list(TaskFilters(user_id=1))
    assert [task.title for task in everything] == ["New done", "Open low", "Old done"]

    completed = repository.list(TaskFilters(user_id=1, completed=True))
    assert [task.title for task in completed] == ["New done", "Old done"]

    pending = repository.list(TaskFilters(user_id=1, completed=False))
    assert [task.title for task in pending] == ["Open low"]

    high = repository.list(TaskFilters(user_id=1, priority="high"))
    assert [task.title for task in high] == ["New done", "Old done"]

    assert repository.list(TaskFilters(user_id=3)) == []


def test_task_repository_update_touches_only_given_values(session: Session) -> None:
    repository = TaskRepository(session)
    due = datetime(2025, 6, 1, 12, 0)
    task = repository.create(
        Task(user_id=1, title="Draft", description="Keep", priority="low", due_date=due)
    )
    assert task.id is not None
    original_updated_at = task.updated_at

    updated = repository.update(task_id=task.id, user_id=1, values={"completed": True})

    assert updated.completed is True
    assert updated.title == "Draft"
    assert updated.description == "Keep"
    assert updated.priority == "low"
    assert updated.due_date == due
    assert updated.updated_at >= original_updated_at

    cleared = repository.update(task_id=task.id, user_id=1, values={"due_date": None})
    assert cleared.due_date is None


def test_task_repository_update_signals_zero_matched_rows(session: Session) -> None:
    repository = TaskRepository(session)
    task = repository.create(Task(user_id=1, title="Owned"))
    assert task.id is not None

    with pytest.raises(RecordNotFoundError):
        repository.update(task_id=task.id, user_id=2, values={"title": "Hijacked"})
    with pytest.raises(RecordNotFoundError):
        repository.update(task_id=999999, user_id=1, values={"title": "Missing"})

    reloaded = repository.get(task_id=task.id, user_id=1)
    assert reloaded is not None
    assert reloaded.title == "Owned"


def test_task_repository_delete_is_scoped_by_owner(session: Session) -> None:
    repository = TaskRepository(session)
    task = repository.create(Task(user_id=1, title="Disposable"))
    assert task.id is not None

    with pytest.raises(RecordNotFoundError):
        repository.delete(task_id=task.id, user_id=2)
    assert repository.get(task_id=task.id, user_id=1) is not None

    repository.delete(task_id=task.id, user_id=1)
    assert repository.get(task_id=task.id, user_id=1) is None

    with pytest.raises(RecordNotFoundError):
        repository.delete(task_id=task.id, user_id=1)


@pytest.mark.parametrize("task_id", [0, -1, 2**63, 2**70])
def test_task_repository_treats_unstorable_ids_as_missing(
    session: Session,
    task_id: int,
) -> None:
    repository = TaskRepository(session)
    repository.create(Task(user_id=1, title="Existing"))

    assert repository.get(task_id=task_id, user_id=1) is None
    with pytest.raises(RecordNotFoundError):
        repository.update(task_id=task_id, user_id=1, values={"title": "Nope"})
    with pytest.raises(RecordNotFoundError):
        repository.delete(task_id=task_id, user_id=1)

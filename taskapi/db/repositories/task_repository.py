from __future__ import annotations

import builtins
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import delete, update
from sqlmodel import Session, select

from taskapi.db.models import Task, is_storable_id, utc_now
from taskapi.db.repositories.common import RecordNotFoundError


@dataclass(frozen=True, slots=True)
class TaskFilters:
    user_id: int
    completed: bool | None = None
    priority: str | None = None


class TaskStore(Protocol):
    """Record-oriented persistence operations the task service relies on.

    Single-record lookups, updates and deletes are always keyed by the
    ``(task_id, user_id)`` pair. ``update`` and ``delete`` raise
    :class:`RecordNotFoundError` when the pair matches no row.
    """

    def create(self, task: Task) -> Task: ...

    def list(self, filters: TaskFilters) -> builtins.list[Task]: ...

    def get(self, *, task_id: int, user_id: int) -> Task | None: ...

    def update(self, *, task_id: int, user_id: int, values: Mapping[str, Any]) -> Task: ...

    def delete(self, *, task_id: int, user_id: int) -> None: ...


class TaskRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, task: Task) -> Task:
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def list(self, filters: TaskFilters) -> builtins.list[Task]:
        statement = select(Task).where(Task.user_id == filters.user_id)
        if filters.completed is not None:
            statement = statement.where(Task.completed == filters.completed)
        if filters.priority is not None:
            statement = statement.where(Task.priority == filters.priority)

        statement = statement.order_by(
            Task.created_at.desc(),  # type: ignore[attr-defined]
            Task.id.desc(),  # type: ignore[union-attr]
        )
        return builtins.list(self.session.exec(statement).all())

    def get(self, *, task_id: int, user_id: int) -> Task | None:
        if not is_storable_id(task_id):
            return None
        statement = select(Task).where(Task.id == task_id).where(Task.user_id == user_id)
        return self.session.exec(statement).first()

    def update(self, *, task_id: int, user_id: int, values: Mapping[str, Any]) -> Task:
        if not is_storable_id(task_id):
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)
        statement = (
            update(Task)
            .where(Task.id == task_id)  # type: ignore[arg-type]
            .where(Task.user_id == user_id)  # type: ignore[arg-type]
            .values(**{**values, "updated_at": utc_now()})
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]

        if result.rowcount != 1:
            self.session.rollback()
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)

        self.session.commit()
        updated = self.get(task_id=task_id, user_id=user_id)
        if updated is None:
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)
        return updated

    def delete(self, *, task_id: int, user_id: int) -> None:
        if not is_storable_id(task_id):
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)
        statement = (
            delete(Task)
            .where(Task.id == task_id)  # type: ignore[arg-type]
            .where(Task.user_id == user_id)  # type: ignore[arg-type]
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]

        if result.rowcount != 1:
            self.session.rollback()
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)

        self.session.commit()

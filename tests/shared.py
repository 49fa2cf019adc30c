from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from taskapi.db.models import Task, utc_now
from taskapi.db.repositories import RecordNotFoundError, TaskFilters


def to_sqlite_url(path: Path) -> str:
    return f"sqlite:///{path.as_posix()}"


def user_headers(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


@dataclass
class ApiTestContext:
    client: TestClient
    engine: Engine
    user_id: int
    other_user_id: int

    @property
    def headers(self) -> dict[str, str]:
        return user_headers(self.user_id)

    @property
    def other_headers(self) -> dict[str, str]:
        return user_headers(self.other_user_id)


@dataclass
class InMemoryTaskStore:
    """Dictionary-backed TaskStore keeping the (id, user_id) scoping rules."""

    tasks: dict[int, Task] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    _next_id: int = 1

    def create(self, task: Task) -> Task:
        self.calls.append("create")
        task.id = self._next_id
        self._next_id += 1
        self.tasks[task.id] = task
        return task

    def list(self, filters: TaskFilters) -> list[Task]:
        self.calls.append("list")
        matches = [
            task
            for task in self.tasks.values()
            if task.user_id == filters.user_id
            and (filters.completed is None or task.completed == filters.completed)
            and (filters.priority is None or task.priority == filters.priority)
        ]
        return sorted(matches, key=lambda task: (task.created_at, task.id or 0), reverse=True)

    def get(self, *, task_id: int, user_id: int) -> Task | None:
        self.calls.append("get")
        task = self.tasks.get(task_id)
        if task is None or task.user_id != user_id:
            return None
        return task

    def update(self, *, task_id: int, user_id: int, values: Mapping[str, Any]) -> Task:
        self.calls.append("update")
        task = self.tasks.get(task_id)
        if task is None or task.user_id != user_id:
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)
        for name, value in values.items():
            setattr(task, name, value)
        task.updated_at = utc_now()
        return task

    def delete(self, *, task_id: int, user_id: int) -> None:
        self.calls.append("delete")
        task = self.tasks.get(task_id)
        if task is None or task.user_id != user_id:
            raise RecordNotFoundError("Task", id=task_id, user_id=user_id)
        del self.tasks[task_id]

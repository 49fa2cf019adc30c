from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any

from taskapi.core.logging import get_logger
from taskapi.db.models import Task
from taskapi.db.repositories import RecordNotFoundError, TaskFilters, TaskStore
from taskapi.services.errors import InvalidTaskNameError, TaskNotFoundError

UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "description", "completed", "due_date", "priority"}
)
_LEADING_DIGIT = re.compile(r"\d", re.ASCII)
logger = get_logger("taskapi.services.tasks")


@dataclass(frozen=True, slots=True)
class TaskQuery:
    """Raw list filters as they arrive from the query string."""

    completed: str | None = None
    priority: str | None = None


def validate_title(title: str) -> None:
    if _LEADING_DIGIT.match(title):
        raise InvalidTaskNameError(title)


def parse_due_date(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 date or date-time into an aware UTC datetime.

    Date-only values mean midnight UTC and naive date-times are read as UTC.
    Raises ``ValueError`` for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = value.strip()
        if not text:
            raise ValueError("due_date must not be empty")
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _optional_due_date(value: str | datetime | date | None) -> datetime | None:
    if value is None or value == "":
        return None
    return parse_due_date(value)


def build_task_filters(owner_id: int, query: TaskQuery) -> TaskFilters:
    completed = None if query.completed is None else query.completed == "true"
    priority = query.priority or None
    return TaskFilters(user_id=owner_id, completed=completed, priority=priority)


class TaskService:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def create_task(self, owner_id: int, data: Mapping[str, Any]) -> Task:
        title = data["title"]
        validate_title(title)

        task = Task(
            user_id=owner_id,
            title=title,
            description=data.get("description"),
            due_date=_optional_due_date(data.get("due_date")),
            priority=data.get("priority"),
        )
        return self._store.create(task)

    def get_tasks(self, owner_id: int, query: TaskQuery | None = None) -> list[Task]:
        filters = build_task_filters(owner_id, query or TaskQuery())
        return self._store.list(filters)

    def get_task_by_id(self, owner_id: int, task_id: int) -> Task:
        task = self._store.get(task_id=task_id, user_id=owner_id)
        if task is None:
            logger.debug("task.lookup_missed", task_id=task_id, user_id=owner_id)
            raise TaskNotFoundError(task_id)
        return task

    def update_task(self, owner_id: int, task_id: int, changes: Mapping[str, Any]) -> Task:
        values = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}
        if "title" in values:
            validate_title(values["title"])
        if "due_date" in values:
            values["due_date"] = _optional_due_date(values["due_date"])

        try:
            return self._store.update(task_id=task_id, user_id=owner_id, values=values)
        except RecordNotFoundError as exc:
            logger.debug("task.update_missed", task_id=task_id, user_id=owner_id)
            raise TaskNotFoundError(task_id) from exc

    def delete_task(self, owner_id: int, task_id: int) -> None:
        try:
            self._store.delete(task_id=task_id, user_id=owner_id)
        except RecordNotFoundError as exc:
            logger.debug("task.delete_missed", task_id=task_id, user_id=owner_id)
            raise TaskNotFoundError(task_id) from exc

from __future__ import annotations


class TaskServiceError(Exception):
    """Base class for task domain errors surfaced to the HTTP layer."""


class InvalidTaskNameError(TaskServiceError, ValueError):
    """Raised when a task title starts with a decimal digit."""

    def __init__(self, title: str | None = None) -> None:
        self.title = title
        super().__init__("Task title must not start with a number.")


class TaskNotFoundError(TaskServiceError, LookupError):
    """Raised when no task matches the (task id, owner) pair.

    A task that exists but belongs to someone else is reported the same way.
    """

    def __init__(self, task_id: int | None = None) -> None:
        self.task_id = task_id
        super().__init__("Task not found.")

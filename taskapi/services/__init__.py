from taskapi.services.errors import InvalidTaskNameError, TaskNotFoundError, TaskServiceError
from taskapi.services.task_service import (
    UPDATABLE_FIELDS,
    TaskQuery,
    TaskService,
    build_task_filters,
    parse_due_date,
    validate_title,
)

__all__ = [
    "InvalidTaskNameError",
    "TaskNotFoundError",
    "TaskQuery",
    "TaskService",
    "TaskServiceError",
    "UPDATABLE_FIELDS",
    "build_task_filters",
    "parse_due_date",
    "validate_title",
]

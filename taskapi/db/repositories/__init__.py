from taskapi.db.repositories.common import RecordNotFoundError
from taskapi.db.repositories.task_repository import TaskFilters, TaskRepository, TaskStore

__all__ = [
    "RecordNotFoundError",
    "TaskFilters",
    "TaskRepository",
    "TaskStore",
]

"""Database layer modules and public helpers."""

from taskapi.db.models import Task, utc_now
from taskapi.db.session import get_session

__all__ = [
    "Task",
    "get_session",
    "utc_now",
]

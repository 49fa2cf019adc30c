from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Column, Index, String, Text
from sqlmodel import Field, SQLModel

TITLE_MAX_LENGTH = 255
PRIORITY_MAX_LENGTH = 32
# SQLite INTEGER primary keys are signed 64-bit.
ID_MAX = 2**63 - 1


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_storable_id(value: int) -> bool:
    return 0 < value <= ID_MAX


class Task(SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_user_created_at", "user_id", "created_at"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(nullable=False, index=True)
    title: str = Field(sa_column=Column(String(length=TITLE_MAX_LENGTH), nullable=False))
    description: str | None = Field(default=None, sa_column=Column(Text(), nullable=True))
    completed: bool = Field(default=False, nullable=False)
    due_date: datetime | None = Field(default=None, nullable=True)
    priority: str | None = Field(
        default=None,
        sa_column=Column(String(length=PRIORITY_MAX_LENGTH), nullable=True, index=True),
    )
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)

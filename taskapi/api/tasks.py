from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Query, Response, status
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from sqlmodel import Session

from taskapi.api.errors import ApiException, error_response_docs
from taskapi.core.auth import USER_ID_HEADER, parse_user_id
from taskapi.core.logging import bind_log_context, get_logger
from taskapi.db.models import PRIORITY_MAX_LENGTH, TITLE_MAX_LENGTH
from taskapi.db.repositories import TaskRepository
from taskapi.db.session import get_session
from taskapi.services import TaskQuery, TaskService, parse_due_date

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = get_logger("taskapi.api.tasks")


def _coerce_due_date(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            return None
        return parse_due_date(value)
    return value


DueDate = Annotated[datetime | None, BeforeValidator(_coerce_due_date)]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    due_date: DueDate = None
    priority: str | None = Field(default=None, max_length=PRIORITY_MAX_LENGTH)
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed.",
                "due_date": "2025-05-30",
                "priority": "medium",
            }
        }
    )


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    completed: bool | None = None
    due_date: DueDate = None
    priority: str | None = Field(default=None, max_length=PRIORITY_MAX_LENGTH)
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "completed": True,
                "due_date": None,
            }
        }
    )

    @model_validator(mode="after")
    def validate_payload(self) -> TaskUpdate:
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        for field_name in ("title", "completed"):
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null.")
        return self


class TaskRead(BaseModel):
    id: int
    user_id: int
    title: str
    description: str | None
    completed: bool
    due_date: datetime | None
    priority: str | None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 7,
                "user_id": 1,
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed.",
                "completed": False,
                "due_date": "2025-05-30T00:00:00",
                "priority": "medium",
                "created_at": "2025-05-20T09:12:00",
                "updated_at": "2025-05-20T09:12:00",
            }
        },
    )


DbSession = Annotated[Session, Depends(get_session)]


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(alias=USER_ID_HEADER)] = None,
) -> int:
    user_id = parse_user_id(x_user_id)
    if user_id is None:
        raise ApiException(
            status.HTTP_401_UNAUTHORIZED,
            "UNAUTHORIZED",
            f"Missing or invalid {USER_ID_HEADER} header.",
        )
    bind_log_context(user_id=user_id)
    return user_id


def get_task_service(session: DbSession) -> TaskService:
    return TaskService(TaskRepository(session))


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


@router.get(
    "",
    response_model=list[TaskRead],
    responses=error_response_docs(status.HTTP_401_UNAUTHORIZED),
)
def list_tasks(
    user_id: CurrentUserId,
    service: TaskServiceDep,
    completed: Annotated[str | None, Query()] = None,
    priority: Annotated[str | None, Query(max_length=PRIORITY_MAX_LENGTH)] = None,
) -> list[TaskRead]:
    tasks = service.get_tasks(user_id, TaskQuery(completed=completed, priority=priority))
    return [TaskRead.model_validate(task) for task in tasks]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TaskRead,
    responses=error_response_docs(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    ),
)
def create_task(payload: TaskCreate, user_id: CurrentUserId, service: TaskServiceDep) -> TaskRead:
    task = service.create_task(user_id, payload.model_dump(mode="python"))
    bind_log_context(task_id=task.id)
    logger.info("task.created", task_id=task.id, priority=task.priority)
    return TaskRead.model_validate(task)


@router.get(
    "/{task_id}",
    response_model=TaskRead,
    responses=error_response_docs(
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    ),
)
def get_task(task_id: int, user_id: CurrentUserId, service: TaskServiceDep) -> TaskRead:
    return TaskRead.model_validate(service.get_task_by_id(user_id, task_id))


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    responses=error_response_docs(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    ),
)
@router.patch(
    "/{task_id}",
    response_model=TaskRead,
    responses=error_response_docs(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    ),
)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    user_id: CurrentUserId,
    service: TaskServiceDep,
) -> TaskRead:
    bind_log_context(task_id=task_id)
    changes = payload.model_dump(exclude_unset=True, mode="python")
    task = service.update_task(user_id, task_id, changes)
    logger.info("task.updated", task_id=task_id, fields=sorted(changes))
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=error_response_docs(
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    ),
)
def delete_task(task_id: int, user_id: CurrentUserId, service: TaskServiceDep) -> Response:
    bind_log_context(task_id=task_id)
    service.delete_task(user_id, task_id)
    logger.info("task.deleted", task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

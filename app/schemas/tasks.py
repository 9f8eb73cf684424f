"""Schemas for task and subtask endpoints."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import ORMModel, RecurrencePattern, TaskStatus

SUBTASK_PRIORITY_MIN = 1
SUBTASK_PRIORITY_MAX = 10


class TaskCreate(BaseModel):
    """Create payload. recurrence_count is the maximum number of occurrences for a new series."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    priority: int | None = Field(default=None, ge=1, le=10)
    due_date: date | None = None
    project_id: int | None = None
    status: TaskStatus | None = None
    file: str | None = None
    collaborators: list[str] | None = None

    is_recurring: bool | None = None
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_interval: int | None = Field(default=None, ge=1)
    recurrence_end_date: date | None = None
    recurrence_count: int | None = Field(default=None, ge=1)
    recurrence_weekday: int | None = Field(default=None, ge=0, le=6, description="0=Sunday .. 6=Saturday")

    @model_validator(mode="after")
    def validate_recurrence(self) -> "TaskCreate":
        if self.is_recurring:
            if self.recurrence_pattern is None:
                raise ValueError("recurrence_pattern is required for recurring tasks")
            if self.due_date is None:
                raise ValueError("due_date is required for recurring tasks")
        return self


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: int | None = Field(default=None, ge=1, le=10)
    due_date: date | None = None
    project_id: int | None = None
    status: TaskStatus | None = None
    file: str | None = None
    collaborators: list[str] | None = None
    recurrence_pattern: RecurrencePattern | None = None
    recurrence_interval: int | None = Field(default=None, ge=1)
    recurrence_end_date: date | None = None
    recurrence_weekday: int | None = Field(default=None, ge=0, le=6)


class TaskManager(ORMModel):
    emp_id: str
    name: str
    department: str | None = None


class TaskOut(ORMModel):
    id: int
    title: str
    description: str | None = None
    priority: int | None = None
    due_date: date | None = None
    project_id: int | None = None
    status: str
    file: str | None = None
    collaborators: list[str] = Field(default_factory=list)
    owner_id: str | None = None
    created_at: datetime | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_interval: int | None = None
    recurrence_end_date: date | None = None
    recurrence_count: int | None = None
    recurrence_max_count: int | None = None
    recurrence_weekday: int | None = None
    recurrence_series_id: str | None = None
    last_completed_date: date | None = None
    manager: TaskManager | None = None

    @field_validator("collaborators", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v or []

    @field_validator("is_recurring", mode="before")
    @classmethod
    def none_to_false(cls, v: bool | None) -> bool:
        return bool(v)


class TaskUpdateResponse(TaskOut):
    next_task: TaskOut | None = Field(
        default=None,
        description="Next occurrence created when a recurring task is completed.",
    )


class TaskSummary(ORMModel):
    id: int
    title: str
    status: str
    project_id: int | None = None
    description: str | None = None
    due_date: date | None = None
    priority: int | None = None


class TasksListResponse(BaseModel):
    tasks: list[TaskOut]


class TasksBulkRequest(BaseModel):
    project_ids: list[int] = Field(..., max_length=1000)


class OkResponse(BaseModel):
    ok: bool = True


class TaskHistoryEntry(ORMModel):
    id: int
    task_id: int
    editor_emp_id: str | None = None
    action: str
    details: dict[str, Any] | None = None
    created_at: datetime | None = None


def normalize_subtask_priority(value: Any) -> int | None:
    """Return an int priority in 1..10, or None for anything else (empty, non-numeric, out of range)."""
    if value is None or value == "":
        return None
    try:
        p = int(value)
    except (TypeError, ValueError):
        return None
    if SUBTASK_PRIORITY_MIN <= p <= SUBTASK_PRIORITY_MAX:
        return p
    return None


class SubTaskCreate(BaseModel):
    parent_task_id: int
    title: str = Field(..., max_length=255)
    description: str | None = None
    priority: int | None = None
    status: TaskStatus | None = None
    due_date: date | None = None
    collaborators: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("parent_task_id and title are required")
        return stripped

    @field_validator("priority", mode="before")
    @classmethod
    def clamp_priority(cls, v: Any) -> int | None:
        return normalize_subtask_priority(v)

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: str | None) -> str | None:
        return v or None


class SubTaskUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    priority: int | None = None
    status: TaskStatus | None = None
    due_date: date | None = None
    collaborators: list[str] | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def clamp_priority(cls, v: Any) -> int | None:
        return normalize_subtask_priority(v)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None


class SubTaskOut(ORMModel):
    id: int
    parent_task_id: int
    title: str
    description: str | None = None
    priority: int | None = None
    status: str
    due_date: date | None = None
    collaborators: list[str] = Field(default_factory=list)
    owner_id: str | None = None

    @field_validator("collaborators", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v or []


class SubTasksResponse(BaseModel):
    subtasks: list[SubTaskOut]


class SubTaskResponse(BaseModel):
    subtask: SubTaskOut



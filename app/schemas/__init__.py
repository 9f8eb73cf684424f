"""Pydantic request/response schemas."""

from app.schemas.auth import CurrentUser, LoginRequest, RegisterRequest, TokenResponse
from app.schemas.common import (
    ACTIVE_TASK_STATUSES,
    COMPLETED,
    HIGH_PRIORITY_THRESHOLD,
    ROLE_VALUES,
    TASK_STATUS_VALUES,
    normalize_role,
)
from app.schemas.health import HealthResponse
from app.schemas.notifications import DeadlineCheckResult, NotificationOut
from app.schemas.projects import ProjectCreate, ProjectOut, ProjectUpdate
from app.schemas.tasks import SubTaskCreate, SubTaskOut, TaskCreate, TaskOut, TaskUpdate

__all__ = [
    "ACTIVE_TASK_STATUSES",
    "COMPLETED",
    "CurrentUser",
    "DeadlineCheckResult",
    "HIGH_PRIORITY_THRESHOLD",
    "HealthResponse",
    "LoginRequest",
    "NotificationOut",
    "ProjectCreate",
    "ProjectOut",
    "ProjectUpdate",
    "ROLE_VALUES",
    "RegisterRequest",
    "SubTaskCreate",
    "SubTaskOut",
    "TASK_STATUS_VALUES",
    "TaskCreate",
    "TaskOut",
    "TaskUpdate",
    "TokenResponse",
    "normalize_role",
]

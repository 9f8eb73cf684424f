"""Schemas for notification endpoints and deadline-check results."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import ORMModel


class NotificationCreate(BaseModel):
    """Fields are optional at the schema level so the route can answer 400 'Missing required fields'."""

    title: str | None = None
    type: str | None = None
    emp_id: str | None = None
    description: str | None = None
    task_id: int | None = None
    recipient_id: str | None = None


class NotificationOut(ORMModel):
    id: int
    emp_id: str
    recipient_id: str | None = None
    task_id: int | None = None
    type: str
    notification_category: str | None = None
    title: str
    description: str | None = None
    read: bool = False
    read_at: datetime | None = None
    sent_at: datetime | None = None
    created_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread_count: int = Field(..., ge=0)


class MarkAllReadResponse(BaseModel):
    message: str
    updated_count: int = Field(..., ge=0)
    data: list[NotificationOut]


class DeadlineCheckRequest(BaseModel):
    force: bool = False


class DeadlineNotice(BaseModel):
    """One notification created by a deadline check."""

    type: str
    task_id: int
    emp_id: str
    title: str
    days_remaining: int | None = None


class DeadlineCheckResult(BaseModel):
    success: bool = True
    message: str
    skipped: bool = False
    remaining_minutes: int | None = None
    next_check_available: datetime | None = None
    upcoming_created: int = 0
    missed_created: int = 0
    total_notifications: int = 0
    duplicates_prevented: int = 0
    notifications: list[DeadlineNotice] = Field(default_factory=list)
    timestamp: datetime


class DeadlineServiceStatus(BaseModel):
    available: bool = True
    last_check: datetime | None = None
    next_check_available: datetime | None = None
    cooldown_active: bool = False


class DeadlineStatusResponse(BaseModel):
    success: bool = True
    message: str
    data: DeadlineServiceStatus

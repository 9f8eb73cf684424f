"""In-app notifications for the caller, plus the deadline-check trigger and status."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import SessionLocal, get_db
from app.models import Notification
from app.schemas.auth import CurrentUser
from app.schemas.notifications import (
    DeadlineCheckRequest,
    DeadlineCheckResult,
    DeadlineStatusResponse,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationOut,
    UnreadCountResponse,
)
from app.services.deadlines import deadline_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


def run_background_deadline_check() -> None:
    """Unforced deadline check on its own session; failures are logged, never raised."""
    db = SessionLocal()
    try:
        result = deadline_notifier.run_checks(db)
        if not result.skipped:
            logger.info(
                "Background deadline check created %s notifications",
                result.total_notifications,
            )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Background deadline check failed: %s", e)
    finally:
        db.close()


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Notification]:
    """The caller's notifications, newest first. Also schedules a deadline check (cooldown applies)."""
    notifications = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    if get_settings().DEADLINE_CHECK_ON_LIST:
        background_tasks.add_task(run_background_deadline_check)
    return notifications


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UnreadCountResponse:
    count = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id, Notification.read.is_(False))
        .count()
    )
    return UnreadCountResponse(unread_count=count)


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def create_notification(
    body: NotificationCreate,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Notification:
    if not body.title or not body.type or not body.emp_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    notification = Notification(
        emp_id=body.emp_id,
        recipient_id=body.recipient_id,
        task_id=body.task_id,
        type=body.type,
        title=body.title,
        description=body.description,
        read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


@router.patch("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MarkAllReadResponse:
    unread = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id, Notification.read.is_(False))
        .all()
    )
    now = datetime.now(timezone.utc)
    for notification in unread:
        notification.read = True
        notification.read_at = now
    db.commit()
    return MarkAllReadResponse(
        message="All notifications marked as read",
        updated_count=len(unread),
        data=[NotificationOut.model_validate(n) for n in unread],
    )


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.emp_id == current_user.emp_id)
        .first()
    )
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    notification.read = True
    notification.read_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/check-deadlines", response_model=DeadlineCheckResult)
def check_deadlines(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    body: DeadlineCheckRequest | None = None,
) -> DeadlineCheckResult:
    force = body.force if body is not None else False
    logger.info("Deadline check requested", extra={"emp_id": current_user.emp_id, "forced": force})
    return deadline_notifier.run_checks(db, force=force)


@router.get("/deadline-status", response_model=DeadlineStatusResponse)
def deadline_status(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
) -> DeadlineStatusResponse:
    return DeadlineStatusResponse(
        message="Deadline service status retrieved",
        data=deadline_notifier.status(),
    )

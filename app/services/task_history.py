"""Audit trail for task and subtask edits (task_edit_history)."""

import logging
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import TaskEditHistory
from app.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)


def record_task_history(
    db: Session,
    task_id: int,
    editor: CurrentUser,
    action: str,
    details: dict[str, Any] | None = None,
) -> bool:
    """
    Write one history row and commit it. Best effort: the edit it describes is
    already committed, so a failure here is logged and reported as False.
    """
    entry = TaskEditHistory(
        task_id=task_id,
        editor_emp_id=editor.emp_id,
        editor_user_id=editor.id,
        action=action,
        details=jsonable_encoder(details) if details is not None else None,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Failed to write task history",
            extra={"task_id": task_id, "action": action, "reason": str(e)[:500]},
        )
        return False
    return True


def list_task_history(db: Session, task_id: int) -> list[TaskEditHistory]:
    """History rows for a task, newest first."""
    return (
        db.query(TaskEditHistory)
        .filter(TaskEditHistory.task_id == task_id)
        .order_by(TaskEditHistory.created_at.desc(), TaskEditHistory.id.desc())
        .all()
    )

"""
Recurring tasks.

A recurring task is an ordinary task row carrying recurrence metadata. Completing
one creates the next row of the series with a new due date; there is no separate
template or history table. All rows of a series share recurrence_series_id and
recurrence_count holds the occurrence number (1-based).
"""

import calendar
import logging
import uuid
from datetime import date, timedelta
from typing import Any

from sqlalchemy.orm import Session

from app.models import SubTask, Task

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

MONTHS_PER_STEP = {"monthly": 1, "quarterly": 3, "yearly": 12}


class RecurrenceError(Exception):
    """Raised for an unknown recurrence pattern or unusable recurrence data."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _sunday_based_weekday(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def _next_weekday(from_date: date, target_weekday: int, extra_weeks: int = 0) -> date:
    """Next occurrence of target_weekday strictly after from_date, plus extra_weeks."""
    days = (target_weekday - _sunday_based_weekday(from_date)) % 7
    if days == 0:
        days = 7
    return from_date + timedelta(days=days + 7 * extra_weeks)


def _add_months(d: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's last day."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_next_occurrence(
    current: date,
    pattern: str,
    interval: int = 1,
    weekday: int | None = None,
) -> date:
    """
    Next due date after `current` for the given pattern.

    weekday (0=Sunday) only applies to weekly and biweekly: the next strictly-later
    occurrence of that day is used, then (interval - 1) more weeks for weekly or
    (2 * interval - 1) more weeks for biweekly.
    """
    interval = interval or 1
    if interval < 1:
        raise RecurrenceError(f"Invalid recurrence interval: {interval}")
    if pattern == "daily":
        return current + timedelta(days=interval)
    if pattern == "weekly":
        if weekday is not None:
            return _next_weekday(current, weekday, interval - 1)
        return current + timedelta(weeks=interval)
    if pattern == "biweekly":
        if weekday is not None:
            return _next_weekday(current, weekday, 2 * interval - 1)
        return current + timedelta(weeks=2 * interval)
    if pattern in MONTHS_PER_STEP:
        return _add_months(current, MONTHS_PER_STEP[pattern] * interval)
    raise RecurrenceError(f"Invalid recurrence pattern: {pattern}")


def should_continue_recurrence(
    next_date: date,
    end_date: date | None,
    max_count: int | None,
    current_count: int,
) -> bool:
    """False once next_date is past end_date or current_count has reached max_count."""
    if end_date is not None and next_date > end_date:
        return False
    if max_count and current_count >= max_count:
        return False
    return True


def create_recurring_task(db: Session, data: dict[str, Any], owner_id: str) -> Task:
    """
    Insert the first occurrence of a new series.

    data["recurrence_count"] is read as the series' maximum number of occurrences.
    """
    values = dict(data)
    max_count = values.pop("recurrence_count", None)
    values.update(
        owner_id=owner_id,
        status="ongoing",
        is_recurring=True,
        recurrence_series_id=str(uuid.uuid4()),
        recurrence_count=1,
        recurrence_max_count=max_count,
    )
    task = Task(**values)
    db.add(task)
    db.commit()
    db.refresh(task)
    weekday = task.recurrence_weekday
    logger.info(
        "Created recurring task %s (due %s), occurrence 1%s%s",
        task.id,
        task.due_date,
        f" of {max_count}" if max_count else "",
        f", recurs on {WEEKDAY_NAMES[weekday]}" if weekday is not None else "",
    )
    return task


def _copy_subtasks(db: Session, from_task_id: int, to_task: Task) -> int:
    subtasks = db.query(SubTask).filter(SubTask.parent_task_id == from_task_id).all()
    for sub in subtasks:
        db.add(
            SubTask(
                parent_task_id=to_task.id,
                title=sub.title,
                description=sub.description,
                priority=sub.priority,
                status="ongoing",
                collaborators=list(sub.collaborators or []),
                owner_id=to_task.owner_id,
            )
        )
    return len(subtasks)


def create_next_recurring_task(db: Session, completed: Task) -> Task | None:
    """Create the occurrence after `completed`, or return None when the series is finished."""
    if completed.due_date is None:
        raise RecurrenceError("Recurring task has no due date")

    weekday = None
    if completed.recurrence_pattern in ("weekly", "biweekly"):
        weekday = completed.recurrence_weekday
    next_date = calculate_next_occurrence(
        completed.due_date,
        completed.recurrence_pattern,
        completed.recurrence_interval or 1,
        weekday,
    )

    current_num = completed.recurrence_count or 1
    max_count = completed.recurrence_max_count
    if not should_continue_recurrence(next_date, completed.recurrence_end_date, max_count, current_num):
        logger.info(
            "Recurrence series %s finished at occurrence %s",
            completed.recurrence_series_id,
            current_num,
        )
        return None

    next_task = Task(
        title=completed.title,
        description=completed.description,
        due_date=next_date,
        status="ongoing",
        priority=completed.priority,
        owner_id=completed.owner_id,
        project_id=completed.project_id,
        collaborators=list(completed.collaborators or []),
        file=completed.file,
        is_recurring=True,
        recurrence_pattern=completed.recurrence_pattern,
        recurrence_interval=completed.recurrence_interval,
        recurrence_end_date=completed.recurrence_end_date,
        recurrence_count=current_num + 1,
        recurrence_max_count=max_count,
        recurrence_weekday=completed.recurrence_weekday,
        recurrence_series_id=completed.recurrence_series_id,
    )
    db.add(next_task)
    db.flush()
    copied = _copy_subtasks(db, completed.id, next_task)
    logger.info(
        "Created next recurring task %s (due %s), occurrence %s, subtasks copied=%s",
        next_task.id,
        next_date,
        current_num + 1,
        copied,
    )
    return next_task


def handle_task_completion(db: Session, task: Task, completed_on: date | None = None) -> Task | None:
    """
    Called after a task moved to completed. Stamps last_completed_date and, for a
    recurring task, creates the next occurrence. Commits; returns the new task or None.
    """
    if not task.is_recurring:
        return None
    task.last_completed_date = completed_on or date.today()
    next_task = create_next_recurring_task(db, task)
    db.commit()
    if next_task is not None:
        db.refresh(next_task)
    return next_task


def get_recurrence_instances(db: Session, series_id: str) -> list[Task]:
    """All tasks of a series ordered by due date."""
    return (
        db.query(Task)
        .filter(Task.recurrence_series_id == series_id)
        .order_by(Task.due_date.asc(), Task.id.asc())
        .all()
    )

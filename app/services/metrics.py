"""Small shared helpers for reporting reducers (rates, overdue checks, rounding)."""

import math
from datetime import date, datetime, timezone
from typing import Any

from app.schemas.common import ACTIVE_TASK_STATUSES, COMPLETED


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positives (dashboard numbers never go negative)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def percentage(part: int, total: int) -> int:
    """Integer percentage of part/total, half-up; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(round_half_up(part / total * 100))


def to_date(value: date | datetime | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def is_completed(task: Any) -> bool:
    return task.status == COMPLETED


def is_active(task: Any) -> bool:
    return task.status in ACTIVE_TASK_STATUSES


def is_overdue(task: Any, today: date) -> bool:
    """Not completed and due strictly before today."""
    due = to_date(task.due_date)
    return due is not None and due < today and not is_completed(task)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def risk_level(count: int, high_above: int, medium_above: int) -> str:
    if count > high_above:
        return "high"
    if count > medium_above:
        return "medium"
    return "low"

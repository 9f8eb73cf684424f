"""
Deadline notifications: remind owners and collaborators of tasks due soon and
flag tasks whose due date has passed.

Runs on demand (API trigger, background task after listing notifications, or the
app.deadlines CLI). A process-wide cooldown keeps repeated unforced triggers cheap;
the unique constraint on notifications(task_id, emp_id, type, title) makes the
checks idempotent across processes.
"""

import logging
import math
import threading
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import Notification, Task
from app.schemas.common import COMPLETED
from app.schemas.notifications import DeadlineCheckResult, DeadlineNotice, DeadlineServiceStatus

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

UPCOMING_DEADLINE = "Upcoming Deadline"
DEADLINE_MISSED = "Deadline Missed"
DEADLINE_CATEGORY = "deadline"


def upcoming_title(days: int, task_title: str) -> str:
    unit = "day" if days == 1 else "days"
    return f"{days} {unit} before {task_title} is due"


def missed_title(task_title: str) -> str:
    return f"Overdue: {task_title} deadline has passed"


def task_recipients(task: Task) -> list[str]:
    """Owner first, then collaborators; blanks and repeats dropped."""
    recipients: list[str] = []
    for emp_id in [task.owner_id, *(task.collaborators or [])]:
        if emp_id is None:
            continue
        emp_id = str(emp_id).strip()
        if emp_id and emp_id not in recipients:
            recipients.append(emp_id)
    return recipients


class DeadlineNotifier:
    """Creates deadline notifications; holds the last-run timestamp for the cooldown."""

    def __init__(self, check_days: Iterable[int], cooldown_sec: int) -> None:
        self.check_days = sorted(set(check_days))
        self.cooldown = timedelta(seconds=cooldown_sec)
        self._last_check: datetime | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DeadlineNotifier":
        return cls(settings.DEADLINE_CHECK_DAYS, settings.DEADLINE_CHECK_COOLDOWN_SEC)

    @property
    def last_check(self) -> datetime | None:
        return self._last_check

    def reset(self) -> None:
        with self._lock:
            self._last_check = None

    def status(self, now: datetime | None = None) -> DeadlineServiceStatus:
        now = now or datetime.now(timezone.utc)
        last = self._last_check
        if last is None:
            return DeadlineServiceStatus(available=True)
        next_available = last + self.cooldown
        return DeadlineServiceStatus(
            available=True,
            last_check=last,
            next_check_available=next_available,
            cooldown_active=now < next_available,
        )

    def _claim_run(self, force: bool, now: datetime) -> timedelta | None:
        """Record a run at `now` and return None, or return the remaining cooldown."""
        with self._lock:
            if not force and self._last_check is not None:
                remaining = self._last_check + self.cooldown - now
                if remaining > timedelta(0):
                    return remaining
            self._last_check = now
            return None

    def _release_run(self, now: datetime, previous: datetime | None) -> None:
        """Undo a claim made at `now` unless a later run has claimed since."""
        with self._lock:
            if self._last_check == now:
                self._last_check = previous

    def run_checks(
        self,
        db: Session,
        force: bool = False,
        now: datetime | None = None,
    ) -> DeadlineCheckResult:
        """Run upcoming and missed checks unless the cooldown is active (force bypasses it)."""
        now = now or datetime.now(timezone.utc)
        previous = self._last_check
        remaining = self._claim_run(force, now)
        if remaining is not None:
            return DeadlineCheckResult(
                message="Deadline check skipped due to cooldown",
                skipped=True,
                remaining_minutes=math.ceil(remaining.total_seconds() / 60),
                next_check_available=now + remaining,
                timestamp=now,
            )

        today = now.date()
        notices: list[DeadlineNotice] = []
        try:
            upcoming, upcoming_dupes = self.check_upcoming(db, today, notices)
            missed, missed_dupes = self.check_missed(db, today, notices)
            db.commit()
        except Exception:
            # A failed run must not start the cooldown.
            self._release_run(now, previous)
            raise

        total = upcoming + missed
        duplicates = upcoming_dupes + missed_dupes
        logger.info(
            "Deadline check completed",
            extra={
                "upcoming_created": upcoming,
                "missed_created": missed,
                "duplicates_prevented": duplicates,
                "forced": force,
            },
        )
        return DeadlineCheckResult(
            message=f"All deadline checks completed. Created {total} total notifications.",
            upcoming_created=upcoming,
            missed_created=missed,
            total_notifications=total,
            duplicates_prevented=duplicates,
            notifications=notices,
            timestamp=now,
        )

    def check_upcoming(
        self,
        db: Session,
        today: date,
        notices: list[DeadlineNotice],
    ) -> tuple[int, int]:
        """Notify for open tasks due exactly `days` ahead, per configured offset."""
        created = duplicates = 0
        for days in self.check_days:
            target = today + timedelta(days=days)
            tasks = (
                db.query(Task)
                .filter(Task.due_date == target, Task.status != COMPLETED)
                .all()
            )
            for task in tasks:
                title = upcoming_title(days, task.title)
                unit = "day" if days == 1 else "days"
                description = (
                    f'Your task "{task.title}" is due in {days} {unit} ({task.due_date}). '
                    "Please make sure to complete it on time."
                )
                for emp_id in task_recipients(task):
                    if self._create(db, task, emp_id, UPCOMING_DEADLINE, title, description):
                        created += 1
                        notices.append(
                            DeadlineNotice(
                                type=UPCOMING_DEADLINE,
                                task_id=task.id,
                                emp_id=emp_id,
                                title=title,
                                days_remaining=days,
                            )
                        )
                    else:
                        duplicates += 1
        return created, duplicates

    def check_missed(
        self,
        db: Session,
        today: date,
        notices: list[DeadlineNotice],
    ) -> tuple[int, int]:
        """Notify once per recipient for every open task due before today."""
        created = duplicates = 0
        tasks = (
            db.query(Task)
            .filter(Task.due_date < today, Task.status != COMPLETED)
            .all()
        )
        for task in tasks:
            title = missed_title(task.title)
            description = (
                f'Your task "{task.title}" was due on {task.due_date} and is now overdue. '
                "Please complete it as soon as possible."
            )
            for emp_id in task_recipients(task):
                if self._create(db, task, emp_id, DEADLINE_MISSED, title, description):
                    created += 1
                    notices.append(
                        DeadlineNotice(type=DEADLINE_MISSED, task_id=task.id, emp_id=emp_id, title=title)
                    )
                else:
                    duplicates += 1
        return created, duplicates

    def _create(
        self,
        db: Session,
        task: Task,
        emp_id: str,
        type_: str,
        title: str,
        description: str,
    ) -> bool:
        """Insert one notification; False if the same (task, emp, type, title) already exists."""
        existing = (
            db.query(Notification.id)
            .filter(
                Notification.task_id == task.id,
                Notification.emp_id == emp_id,
                Notification.type == type_,
                Notification.title == title,
            )
            .first()
        )
        if existing is not None:
            return False
        now = datetime.now(timezone.utc)
        notification = Notification(
            emp_id=emp_id,
            task_id=task.id,
            type=type_,
            notification_category=DEADLINE_CATEGORY,
            title=title,
            description=description,
            read=False,
            sent_at=now,
        )
        try:
            with db.begin_nested():
                db.add(notification)
        except IntegrityError:
            # Another process inserted the same notification between the check and the insert.
            return False
        return True


deadline_notifier = DeadlineNotifier.from_settings(get_settings())

"""Unit tests for app.services.deadlines: upcoming/missed checks, dedup and cooldown."""

import unittest
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

from sqlalchemy.exc import IntegrityError, OperationalError

from app.services.deadlines import (
    DEADLINE_MISSED,
    UPCOMING_DEADLINE,
    DeadlineNotifier,
    missed_title,
    task_recipients,
    upcoming_title,
)

NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def _task(task_id: int, title: str, due: date, owner: str = "E001", collaborators: list[str] | None = None):
    return SimpleNamespace(
        id=task_id,
        title=title,
        due_date=due,
        status="ongoing",
        owner_id=owner,
        collaborators=collaborators or [],
    )


def _session(task_batches: list[list[object]], existing: object = None) -> MagicMock:
    """Session whose Task queries return task_batches in order (days 1, 3, 7, then missed)."""
    db = MagicMock()
    chain = db.query.return_value.filter.return_value
    chain.all.side_effect = task_batches
    chain.first.return_value = existing
    return db


class TestTitles(unittest.TestCase):
    def test_upcoming_singular(self) -> None:
        self.assertEqual(upcoming_title(1, "Report"), "1 day before Report is due")

    def test_upcoming_plural(self) -> None:
        self.assertEqual(upcoming_title(3, "Report"), "3 days before Report is due")

    def test_missed(self) -> None:
        self.assertEqual(missed_title("Report"), "Overdue: Report deadline has passed")


class TestTaskRecipients(unittest.TestCase):
    def test_owner_first_without_repeats_or_blanks(self) -> None:
        task = _task(1, "T", TODAY, owner="E001", collaborators=["E002", "E001", " ", "E003"])
        self.assertEqual(task_recipients(task), ["E001", "E002", "E003"])

    def test_no_owner(self) -> None:
        task = _task(1, "T", TODAY, owner=None, collaborators=["E002"])
        self.assertEqual(task_recipients(task), ["E002"])


class TestRunChecks(unittest.TestCase):
    def test_creates_upcoming_and_missed_notifications(self) -> None:
        due_tomorrow = _task(1, "Report", TODAY + timedelta(days=1), collaborators=["E002"])
        overdue = _task(2, "Budget", TODAY - timedelta(days=2))
        db = _session([[due_tomorrow], [], [], [overdue]])
        notifier = DeadlineNotifier([1, 3, 7], cooldown_sec=300)

        result = notifier.run_checks(db, now=NOW)

        self.assertFalse(result.skipped)
        self.assertEqual(result.upcoming_created, 2)
        self.assertEqual(result.missed_created, 1)
        self.assertEqual(result.total_notifications, 3)
        self.assertEqual(result.duplicates_prevented, 0)
        self.assertEqual(len(result.notifications), 3)
        first = result.notifications[0]
        self.assertEqual(first.type, UPCOMING_DEADLINE)
        self.assertEqual(first.emp_id, "E001")
        self.assertEqual(first.title, "1 day before Report is due")
        self.assertEqual(first.days_remaining, 1)
        self.assertEqual(result.notifications[2].type, DEADLINE_MISSED)
        self.assertEqual(db.add.call_count, 3)
        added = db.add.call_args_list[0][0][0]
        self.assertEqual(added.notification_category, "deadline")
        self.assertFalse(added.read)
        db.commit.assert_called_once()

    def test_existing_notification_counts_as_duplicate(self) -> None:
        overdue = _task(2, "Budget", TODAY - timedelta(days=2), collaborators=["E002"])
        db = _session([[], [], [], [overdue]], existing=(99,))
        result = DeadlineNotifier([1, 3, 7], 300).run_checks(db, now=NOW)
        self.assertEqual(result.total_notifications, 0)
        self.assertEqual(result.duplicates_prevented, 2)
        db.add.assert_not_called()

    def test_concurrent_insert_counts_as_duplicate(self) -> None:
        overdue = _task(2, "Budget", TODAY - timedelta(days=2))
        db = _session([[], [], [], [overdue]])
        db.begin_nested.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
        result = DeadlineNotifier([1, 3, 7], 300).run_checks(db, now=NOW)
        self.assertEqual(result.missed_created, 0)
        self.assertEqual(result.duplicates_prevented, 1)

    def test_cooldown_skips_second_run(self) -> None:
        notifier = DeadlineNotifier([1], cooldown_sec=300)
        notifier.run_checks(_session([[], []]), now=NOW)

        db = MagicMock()
        result = notifier.run_checks(db, now=NOW + timedelta(seconds=60))

        self.assertTrue(result.skipped)
        self.assertEqual(result.remaining_minutes, 4)
        self.assertEqual(result.next_check_available, NOW + timedelta(seconds=300))
        db.query.assert_not_called()

    def test_failed_run_does_not_start_cooldown(self) -> None:
        notifier = DeadlineNotifier([1], cooldown_sec=300)
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        with self.assertRaises(OperationalError):
            notifier.run_checks(db, now=NOW)
        self.assertIsNone(notifier.last_check)

        result = notifier.run_checks(_session([[], []]), now=NOW + timedelta(seconds=30))
        self.assertFalse(result.skipped)
        self.assertEqual(notifier.last_check, NOW + timedelta(seconds=30))

    def test_failed_run_keeps_earlier_cooldown_start(self) -> None:
        notifier = DeadlineNotifier([1], cooldown_sec=300)
        notifier.run_checks(_session([[], []]), now=NOW)
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        with self.assertRaises(OperationalError):
            notifier.run_checks(db, force=True, now=NOW + timedelta(seconds=10))
        self.assertEqual(notifier.last_check, NOW)

    def test_force_bypasses_cooldown(self) -> None:
        notifier = DeadlineNotifier([1], cooldown_sec=300)
        notifier.run_checks(_session([[], []]), now=NOW)
        db = _session([[], []])
        result = notifier.run_checks(db, force=True, now=NOW + timedelta(seconds=10))
        self.assertFalse(result.skipped)
        db.commit.assert_called_once()
        self.assertEqual(notifier.last_check, NOW + timedelta(seconds=10))

    def test_runs_again_after_cooldown(self) -> None:
        notifier = DeadlineNotifier([1], cooldown_sec=300)
        notifier.run_checks(_session([[], []]), now=NOW)
        result = notifier.run_checks(_session([[], []]), now=NOW + timedelta(seconds=301))
        self.assertFalse(result.skipped)


class TestStatus(unittest.TestCase):
    def test_never_run(self) -> None:
        status = DeadlineNotifier([1], 300).status(NOW)
        self.assertTrue(status.available)
        self.assertIsNone(status.last_check)
        self.assertFalse(status.cooldown_active)

    def test_cooldown_active_after_run(self) -> None:
        notifier = DeadlineNotifier([1], 300)
        notifier.run_checks(_session([[], []]), now=NOW)
        status = notifier.status(NOW + timedelta(seconds=30))
        self.assertEqual(status.last_check, NOW)
        self.assertEqual(status.next_check_available, NOW + timedelta(seconds=300))
        self.assertTrue(status.cooldown_active)

    def test_reset_clears_last_check(self) -> None:
        notifier = DeadlineNotifier([1], 300)
        notifier.run_checks(_session([[], []]), now=NOW)
        notifier.reset()
        self.assertIsNone(notifier.last_check)

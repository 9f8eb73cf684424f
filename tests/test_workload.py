"""Unit tests for app.services.workload: per-member task rollup for team managers."""

import unittest
from datetime import date, timedelta
from types import SimpleNamespace

from app.services.workload import build_team_workload, team_member_ids

TODAY = date(2025, 3, 10)


def _user(emp_id: str, name: str) -> SimpleNamespace:
    return SimpleNamespace(emp_id=emp_id, name=name, email=f"{emp_id.lower()}@example.com", role="staff", department="Engineering")


def _task(task_id: int, owner: str, status: str = "ongoing", due: date | None = None, collaborators=None):
    return SimpleNamespace(
        id=task_id,
        title=f"Task {task_id}",
        status=status,
        priority=5,
        due_date=due,
        project_id=None,
        owner_id=owner,
        collaborators=collaborators,
        created_at=None,
    )


TEAMS = [
    SimpleNamespace(id=1, department="Engineering", team_name="Platform", member_ids=["E1", "E2"], manager_ids=["M1"]),
    SimpleNamespace(id=2, department="Engineering", team_name="Infra", member_ids=["E2", "E3"], manager_ids=None),
]


class TestTeamMemberIds(unittest.TestCase):
    def test_unique_in_first_seen_order(self) -> None:
        self.assertEqual(team_member_ids(TEAMS), ["E1", "E2", "E3"])


class TestBuildTeamWorkload(unittest.TestCase):
    def setUp(self) -> None:
        members = [_user("E1", "Ann"), _user("E2", "Bo")]
        tasks = [
            _task(1, "E1", due=TODAY + timedelta(days=2), collaborators=["E2"]),
            _task(2, "E2", status="under review", due=TODAY - timedelta(days=1)),
            _task(3, "E1", status="completed", due=TODAY - timedelta(days=5)),
            _task(4, "E9", due=TODAY),
            _task(5, "E1", due=TODAY + timedelta(days=10), collaborators=["E1"]),
        ]
        self.result = build_team_workload(TEAMS, members, tasks, TODAY, due_soon_days=3)

    def test_owner_and_collaborator_split(self) -> None:
        e1 = self.result.workload["E1"]
        e2 = self.result.workload["E2"]
        self.assertEqual([t.id for t in e1.owned_tasks], [1, 5])
        self.assertEqual(e1.collaboration_tasks, [])
        self.assertEqual([t.id for t in e2.owned_tasks], [2])
        self.assertEqual([t.id for t in e2.collaboration_tasks], [1])

    def test_completed_and_foreign_tasks_ignored(self) -> None:
        self.assertEqual(self.result.workload["E1"].total_tasks, 2)
        self.assertEqual(self.result.workload["E2"].total_tasks, 2)

    def test_due_flags(self) -> None:
        e2 = self.result.workload["E2"]
        self.assertEqual(e2.due_soon_count, 1)
        self.assertEqual(e2.overdue_count, 1)
        self.assertTrue(e2.owned_tasks[0].overdue)
        self.assertFalse(e2.owned_tasks[0].due_soon)
        self.assertFalse(self.result.workload["E1"].owned_tasks[1].due_soon)

    def test_status_breakdown(self) -> None:
        breakdown = self.result.workload["E2"].task_status_breakdown
        self.assertEqual(breakdown["ongoing"], 1)
        self.assertEqual(breakdown["under review"], 1)
        self.assertEqual(breakdown["completed"], 0)

    def test_summary(self) -> None:
        summary = self.result.summary
        self.assertEqual(summary.total_members, 2)
        self.assertEqual(summary.total_tasks, 4)
        self.assertEqual(summary.due_soon, 2)
        self.assertEqual(summary.overdue, 1)
        self.assertEqual(len(self.result.teams), 2)
        self.assertEqual(self.result.teams[1].manager_ids, [])

    def test_no_members(self) -> None:
        result = build_team_workload([], [], [_task(1, "E1")], TODAY)
        self.assertEqual(result.workload, {})
        self.assertEqual(result.summary.total_tasks, 0)

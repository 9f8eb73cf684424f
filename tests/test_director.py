"""Unit tests for app.services.director: company KPIs, departments, workload, risks, collaboration."""

import unittest
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from app.services.director import (
    build_collaboration,
    build_department_performance,
    build_overview,
    build_resource_allocation,
    build_risk_indicators,
    productivity_score,
    workload_level,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def _user(emp_id: str, department: str | None, role: str = "staff") -> SimpleNamespace:
    return SimpleNamespace(emp_id=emp_id, name=emp_id, email=f"{emp_id}@example.com", department=department, role=role)


def _project(pid: int, status: str, owner: str = "E1", members=None, updated_days_ago: int | None = 1):
    updated = NOW - timedelta(days=updated_days_ago) if updated_days_ago is not None else None
    return SimpleNamespace(
        id=pid,
        title=f"Project {pid}",
        status=status,
        owner_id=owner,
        members=members or [],
        updated_at=updated,
        created_at=NOW - timedelta(days=400),
    )


def _task(tid: int, owner: str, status: str = "ongoing", due: date | None = None, priority: int = 5, created_days_ago: int = 1):
    return SimpleNamespace(
        id=tid,
        owner_id=owner,
        status=status,
        due_date=due,
        priority=priority,
        created_at=NOW - timedelta(days=created_days_ago),
    )


USERS = [_user("E1", "Engineering"), _user("E2", "Engineering"), _user("E3", "Sales"), _user("X1", None)]


class TestOverview(unittest.TestCase):
    def test_kpis_portfolio_and_task_metrics(self) -> None:
        projects = [_project(1, "active"), _project(2, "completed"), _project(3, "on-hold"), _project(4, "completed")]
        tasks = [
            _task(1, "E1", status="completed"),
            _task(2, "E1", due=TODAY - timedelta(days=1)),
            _task(3, "E2", status="under review", created_days_ago=45),
            _task(4, "E3", due=TODAY + timedelta(days=5)),
        ]
        overview = build_overview(USERS, projects, tasks, NOW, activity_days=30)

        self.assertEqual(overview.company_kpis.total_employees, 3)
        self.assertEqual(overview.company_kpis.system_activity, 3)
        self.assertEqual(overview.project_portfolio.on_hold, 1)
        self.assertEqual(overview.project_portfolio.completion_rate, 50)
        self.assertEqual(overview.task_metrics.active, 3)
        self.assertEqual(overview.task_metrics.overdue, 1)
        self.assertEqual(overview.task_metrics.completion_rate, 25)

    def test_serializes_with_dashboard_keys(self) -> None:
        payload = build_overview([], [], [], NOW).model_dump(by_alias=True)
        self.assertIn("companyKPIs", payload)
        self.assertIn("onHold", payload["projectPortfolio"])
        self.assertEqual(payload["taskMetrics"]["completionRate"], 0)


class TestDepartmentPerformance(unittest.TestCase):
    def test_productivity_score_formula(self) -> None:
        self.assertEqual(productivity_score(50, 100, 2.0), 56)
        self.assertEqual(productivity_score(0, 0, 5.0), 9)

    def test_per_department_rates(self) -> None:
        projects = [_project(1, "completed", owner="E1"), _project(2, "active", owner="E3")]
        tasks = [_task(1, "E1", status="completed"), _task(2, "E2"), _task(3, "E3")]
        result = {d.name: d for d in build_department_performance(USERS, projects, tasks)}

        self.assertEqual(set(result), {"Engineering", "Sales"})
        eng = result["Engineering"]
        self.assertEqual(eng.employee_count, 2)
        self.assertEqual(eng.task_completion_rate, 50)
        self.assertEqual(eng.project_completion_rate, 100)
        self.assertEqual(eng.tasks_per_employee, 1.0)
        self.assertEqual(eng.productivity_score, 53)
        self.assertEqual(result["Sales"].project_completion_rate, 0)


class TestResourceAllocation(unittest.TestCase):
    def test_workload_levels(self) -> None:
        self.assertEqual(workload_level(8), "overloaded")
        self.assertEqual(workload_level(5), "optimal")
        self.assertEqual(workload_level(2), "moderate")
        self.assertEqual(workload_level(1), "underutilized")
        self.assertEqual(workload_level(0), "underutilized")

    def test_employees_sorted_by_active_tasks(self) -> None:
        tasks = [_task(i, "E2", priority=9 if i < 3 else 4) for i in range(8)]
        tasks.append(_task(20, "E1", due=TODAY - timedelta(days=3)))
        tasks.append(_task(21, "E1", status="completed"))
        result = build_resource_allocation(USERS, tasks, NOW)

        self.assertEqual([e.emp_id for e in result.employee_workloads], ["E2", "E1", "E3"])
        e2 = result.employee_workloads[0]
        self.assertEqual(e2.workload_level, "overloaded")
        self.assertEqual(e2.high_priority_tasks, 3)
        e1 = result.employee_workloads[1]
        self.assertEqual(e1.total_tasks, 2)
        self.assertEqual(e1.active_tasks, 1)
        self.assertEqual(e1.overdue_tasks, 1)

        depts = {d.name: d for d in result.department_workloads}
        self.assertEqual(depts["Engineering"].total_active_tasks, 9)
        self.assertEqual(depts["Engineering"].average_workload, 4.5)
        self.assertEqual(depts["Engineering"].overloaded_employees, 1)
        self.assertEqual(depts["Sales"].underutilized_employees, 1)
        self.assertEqual(result.summary.total_employees, 3)
        self.assertEqual(result.summary.overloaded_count, 1)
        self.assertEqual(result.summary.underutilized_count, 2)


class TestRiskIndicators(unittest.TestCase):
    def test_stagnant_projects_oldest_first(self) -> None:
        projects = [
            _project(1, "active", updated_days_ago=40),
            _project(2, "on-hold", updated_days_ago=90),
            _project(3, "completed", updated_days_ago=200),
            _project(4, "active", updated_days_ago=5),
        ]
        risks = build_risk_indicators(USERS, projects, [], NOW, stagnant_days=30)
        self.assertEqual(risks.stagnant_projects.count, 2)
        self.assertEqual([p.id for p in risks.stagnant_projects.items], [2, 1])
        self.assertEqual(risks.stagnant_projects.risk_level, "low")

    def test_stagnant_falls_back_to_created_at(self) -> None:
        projects = [_project(1, "active", updated_days_ago=None)]
        risks = build_risk_indicators(USERS, projects, [], NOW)
        self.assertEqual(risks.stagnant_projects.count, 1)

    def test_overdue_and_backlog_by_department(self) -> None:
        overdue_due = TODAY - timedelta(days=1)
        tasks = [
            _task(1, "E1", due=overdue_due, priority=9),
            _task(2, "E3", due=overdue_due),
            _task(3, "ZZ", due=overdue_due),
            _task(4, "E1", status="under review", priority=8),
            _task(5, "E1", status="completed", due=overdue_due, priority=10),
        ]
        risks = build_risk_indicators(USERS, [], tasks, NOW)
        self.assertEqual(risks.overdue_tasks.count, 3)
        self.assertEqual(risks.overdue_tasks.high_priority_overdue, 1)
        self.assertEqual(risks.overdue_tasks.by_department, {"Engineering": 1, "Sales": 1, "Unknown": 1})
        backlog = risks.high_priority_backlog
        self.assertEqual(backlog.count, 2)
        self.assertEqual(backlog.ongoing, 1)
        self.assertEqual(backlog.under_review, 1)
        self.assertEqual(backlog.risk_level, "low")


class TestCollaboration(unittest.TestCase):
    def test_cross_department_projects(self) -> None:
        projects = [
            _project(1, "active", members=["E1", "E3"]),
            _project(2, "active", members=["E1", "E2"]),
            _project(3, "active", members=["E1"]),
        ]
        result = build_collaboration(USERS, projects)
        self.assertEqual([p.id for p in result.cross_departmental_projects], [1])
        self.assertEqual(result.cross_departmental_projects[0].departments, ["Engineering", "Sales"])
        metrics = result.collaboration_metrics
        self.assertEqual(metrics.cross_dept_projects, 1)
        self.assertEqual(metrics.collaboration_rate, 33)
        self.assertEqual(metrics.average_departments_per_project, 2.0)

    def test_no_projects(self) -> None:
        metrics = build_collaboration(USERS, []).collaboration_metrics
        self.assertEqual(metrics.collaboration_rate, 0)
        self.assertEqual(metrics.average_departments_per_project, 0.0)

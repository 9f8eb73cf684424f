"""Reducers behind the HR dashboard: headcount, per-employee performance and trends."""

import math
from collections import defaultdict
from collections.abc import Sequence
from datetime import date

from app.models import Project, Task, User
from app.schemas.hr import (
    DepartmentLoad,
    DepartmentReportRow,
    EmployeePerformance,
    EmployeeStats,
    HrInsights,
    PerformanceRanking,
    ProductivityReportRow,
    TrendPoint,
)
from app.services.metrics import (
    as_utc,
    is_active,
    is_completed,
    is_overdue,
    percentage,
    round_half_up,
)

TREND_PERIODS = ("monthly", "weekly")


def _tasks_by_owner(tasks: Sequence[Task]) -> dict[str, list[Task]]:
    grouped: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.owner_id:
            grouped[task.owner_id].append(task)
    return grouped


def build_employee_stats(users: Sequence[User], tasks: Sequence[Task]) -> list[EmployeeStats]:
    owned = _tasks_by_owner(tasks)
    return [
        EmployeeStats(
            emp_id=u.emp_id,
            name=u.name,
            email=u.email,
            department=u.department,
            role=u.role,
            created_at=u.created_at,
            total_tasks=len(owned.get(u.emp_id, [])),
            completed_tasks=sum(1 for t in owned.get(u.emp_id, []) if is_completed(t)),
        )
        for u in users
    ]


def build_insights(
    users: Sequence[User],
    projects: Sequence[Project],
    tasks: Sequence[Task],
    today: date,
) -> HrInsights:
    staffed = [u for u in users if u.department]
    breakdown: dict[str, int] = {}
    for user in staffed:
        breakdown[user.department] = breakdown.get(user.department, 0) + 1
    completed = sum(1 for t in tasks if is_completed(t))
    return HrInsights(
        total_employees=len(staffed),
        department_breakdown=breakdown,
        total_tasks=len(tasks),
        overdue_tasks=sum(1 for t in tasks if is_overdue(t, today)),
        task_completion_rate=percentage(completed, len(tasks)),
        total_projects=len(projects),
        active_projects=sum(1 for p in projects if p.status == "active"),
    )


def build_performance(
    users: Sequence[User],
    tasks: Sequence[Task],
    today: date,
) -> list[EmployeePerformance]:
    owned = _tasks_by_owner(tasks)
    result = []
    for user in users:
        mine = owned.get(user.emp_id, [])
        completed = sum(1 for t in mine if is_completed(t))
        result.append(
            EmployeePerformance(
                emp_id=user.emp_id,
                name=user.name,
                department=user.department,
                role=user.role,
                total_tasks=len(mine),
                completed_tasks=completed,
                overdue_tasks=sum(1 for t in mine if is_overdue(t, today)),
                completion_rate=percentage(completed, len(mine)),
            )
        )
    return result


def build_department_loads(
    users: Sequence[User],
    tasks: Sequence[Task],
    today: date,
) -> list[DepartmentLoad]:
    """Members plus active and overdue owned-task counts per department."""
    owned = _tasks_by_owner(tasks)
    loads: dict[str, DepartmentLoad] = {}
    for user in users:
        if not user.department:
            continue
        load = loads.setdefault(
            user.department,
            DepartmentLoad(name=user.department, members=0, active=0, overdue=0),
        )
        load.members += 1
        for task in owned.get(user.emp_id, []):
            if is_active(task):
                load.active += 1
            if is_overdue(task, today):
                load.overdue += 1
    return list(loads.values())


def build_performance_rankings(
    users: Sequence[User],
    tasks: Sequence[Task],
    today: date,
) -> list[PerformanceRanking]:
    """
    performanceScore = (completed - overdue) / total * 100, overdueRate = overdue / total * 100,
    both 0 for employees without tasks. Sorted best first.
    """
    owned = _tasks_by_owner(tasks)
    rankings = []
    for user in users:
        mine = owned.get(user.emp_id, [])
        completed = sum(1 for t in mine if is_completed(t))
        overdue = sum(1 for t in mine if is_overdue(t, today))
        total = len(mine)
        rankings.append(
            PerformanceRanking(
                emp_id=user.emp_id,
                name=user.name,
                department=user.department,
                total_tasks=total,
                completed_tasks=completed,
                overdue_rate=round_half_up(overdue / total * 100, 1) if total else 0.0,
                performance_score=round_half_up((completed - overdue) / total * 100, 1)
                if total
                else 0.0,
            )
        )
    rankings.sort(key=lambda r: r.performance_score, reverse=True)
    return rankings


def trend_key(created: date, period: str) -> str:
    """YYYY-MM for monthly, YYYY-MM-W<n> for weekly where n = ceil(day / 7)."""
    key = f"{created.year}-{created.month:02d}"
    if period == "weekly":
        key += f"-W{math.ceil(created.day / 7)}"
    return key


def build_trends(tasks: Sequence[Task], period: str = "monthly") -> list[TrendPoint]:
    if period not in TREND_PERIODS:
        raise ValueError(f"period must be one of {TREND_PERIODS}")
    dated = sorted((t for t in tasks if t.created_at is not None), key=lambda t: as_utc(t.created_at))
    points: dict[str, TrendPoint] = {}
    for task in dated:
        key = trend_key(as_utc(task.created_at).date(), period)
        point = points.setdefault(key, TrendPoint(period=key, total=0, completed=0))
        point.total += 1
        if is_completed(task):
            point.completed += 1
    return list(points.values())


def build_productivity_report(
    tasks: Sequence[Task],
    users: Sequence[User],
) -> list[ProductivityReportRow]:
    """Tasks joined with their owner's name and department."""
    owners = {u.emp_id: u for u in users}
    rows = []
    for task in tasks:
        owner = owners.get(task.owner_id)
        rows.append(
            ProductivityReportRow(
                id=task.id,
                title=task.title,
                status=task.status,
                priority=task.priority,
                due_date=task.due_date,
                created_at=task.created_at,
                owner_id=task.owner_id,
                owner_name=owner.name if owner else None,
                owner_department=owner.department if owner else None,
            )
        )
    return rows


def build_department_report(users: Sequence[User]) -> list[DepartmentReportRow]:
    return [
        DepartmentReportRow(department=u.department, role=u.role, created_at=u.created_at)
        for u in users
        if u.department
    ]

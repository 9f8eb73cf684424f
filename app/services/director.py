"""Company-wide reducers behind the director dashboard."""

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timedelta

from app.models import Project, Task, User
from app.schemas.common import HIGH_PRIORITY_THRESHOLD
from app.schemas.director import (
    BacklogRisk,
    CollaborationMetrics,
    CollaborationResponse,
    CompanyKPIs,
    CrossDepartmentProject,
    DepartmentPerformance,
    DepartmentWorkload,
    DirectorOverview,
    EmployeeWorkload,
    OverdueRisk,
    ProjectPortfolio,
    ResourceAllocation,
    ResourceSummary,
    RiskIndicators,
    StagnantProject,
    StagnantProjects,
    TaskMetrics,
)
from app.services.metrics import (
    as_utc,
    is_active,
    is_completed,
    is_overdue,
    percentage,
    risk_level,
    round_half_up,
)

UNKNOWN_DEPARTMENT = "Unknown"
STAGNANT_LIST_LIMIT = 10

# Active-task thresholds, highest first.
WORKLOAD_LEVELS = ((8, "overloaded"), (5, "optimal"), (2, "moderate"))


def employees_with_department(users: Sequence[User]) -> list[User]:
    """Headcount only includes users assigned to a department."""
    return [u for u in users if u.department]


def build_overview(
    users: Sequence[User],
    projects: Sequence[Project],
    tasks: Sequence[Task],
    now: datetime,
    activity_days: int = 30,
) -> DirectorOverview:
    today = now.date()
    since = now - timedelta(days=activity_days)
    employees = employees_with_department(users)

    completed_projects = sum(1 for p in projects if p.status == "completed")
    completed_tasks = sum(1 for t in tasks if is_completed(t))
    recent = sum(1 for t in tasks if t.created_at is not None and as_utc(t.created_at) >= since)

    return DirectorOverview(
        company_kpis=CompanyKPIs(
            total_employees=len(employees),
            total_projects=len(projects),
            total_tasks=len(tasks),
            system_activity=recent,
        ),
        project_portfolio=ProjectPortfolio(
            total=len(projects),
            active=sum(1 for p in projects if p.status == "active"),
            completed=completed_projects,
            on_hold=sum(1 for p in projects if p.status == "on-hold"),
            completion_rate=percentage(completed_projects, len(projects)),
        ),
        task_metrics=TaskMetrics(
            total=len(tasks),
            active=sum(1 for t in tasks if is_active(t)),
            completed=completed_tasks,
            overdue=sum(1 for t in tasks if is_overdue(t, today)),
            completion_rate=percentage(completed_tasks, len(tasks)),
        ),
    )


def productivity_score(task_rate: int, project_rate: int, tasks_per_employee: float) -> int:
    """0.4 * task rate + 0.3 * project rate + 0.3 * min(10 * tasks/employee, 30), half-up."""
    raw = task_rate * 0.4 + project_rate * 0.3 + min(tasks_per_employee * 10, 30) * 0.3
    return int(round_half_up(raw))


def build_department_performance(
    users: Sequence[User],
    projects: Sequence[Project],
    tasks: Sequence[Task],
) -> list[DepartmentPerformance]:
    """Per-department rates over tasks and projects owned by the department's members."""
    by_department: dict[str, list[User]] = defaultdict(list)
    for user in employees_with_department(users):
        by_department[user.department].append(user)

    result = []
    for name, members in by_department.items():
        member_ids = {u.emp_id for u in members}
        dept_tasks = [t for t in tasks if t.owner_id in member_ids]
        dept_projects = [p for p in projects if p.owner_id in member_ids]
        task_rate = percentage(sum(1 for t in dept_tasks if is_completed(t)), len(dept_tasks))
        project_rate = percentage(
            sum(1 for p in dept_projects if p.status == "completed"), len(dept_projects)
        )
        per_employee = round_half_up(len(dept_tasks) / len(members), 1) if members else 0.0
        result.append(
            DepartmentPerformance(
                name=name,
                employee_count=len(members),
                task_completion_rate=task_rate,
                project_completion_rate=project_rate,
                tasks_per_employee=per_employee,
                productivity_score=productivity_score(task_rate, project_rate, per_employee),
                total_tasks=len(dept_tasks),
                total_projects=len(dept_projects),
            )
        )
    return result


def workload_level(active_tasks: int) -> str:
    for threshold, level in WORKLOAD_LEVELS:
        if active_tasks >= threshold:
            return level
    return "underutilized"


def build_resource_allocation(
    users: Sequence[User],
    tasks: Sequence[Task],
    now: datetime,
) -> ResourceAllocation:
    today = now.date()
    tasks_by_owner: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.owner_id:
            tasks_by_owner[task.owner_id].append(task)

    employees = []
    for user in employees_with_department(users):
        owned = tasks_by_owner.get(user.emp_id, [])
        active = [t for t in owned if is_active(t)]
        employees.append(
            EmployeeWorkload(
                emp_id=user.emp_id,
                name=user.name,
                department=user.department,
                role=user.role,
                total_tasks=len(owned),
                active_tasks=len(active),
                overdue_tasks=sum(1 for t in owned if is_overdue(t, today)),
                high_priority_tasks=sum(
                    1 for t in active if (t.priority or 0) >= HIGH_PRIORITY_THRESHOLD
                ),
                workload_level=workload_level(len(active)),
                workload_score=len(active),
            )
        )

    departments: dict[str, DepartmentWorkload] = {}
    for emp in employees:
        dept = departments.setdefault(emp.department, DepartmentWorkload(name=emp.department))
        dept.total_employees += 1
        dept.total_active_tasks += emp.active_tasks
        if emp.workload_level == "overloaded":
            dept.overloaded_employees += 1
        if emp.workload_level == "underutilized":
            dept.underutilized_employees += 1
    for dept in departments.values():
        if dept.total_employees:
            dept.average_workload = round_half_up(dept.total_active_tasks / dept.total_employees, 1)

    # sorted() is stable, so ties keep headcount order.
    employees = sorted(employees, key=lambda e: e.workload_score, reverse=True)
    return ResourceAllocation(
        employee_workloads=employees,
        department_workloads=list(departments.values()),
        summary=ResourceSummary(
            total_employees=len(employees),
            overloaded_count=sum(1 for e in employees if e.workload_level == "overloaded"),
            underutilized_count=sum(1 for e in employees if e.workload_level == "underutilized"),
            optimal_count=sum(1 for e in employees if e.workload_level == "optimal"),
        ),
    )


def _by_department(tasks: Sequence[Task], departments: dict[str, str | None]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for task in tasks:
        dept = departments.get(task.owner_id) or UNKNOWN_DEPARTMENT
        counts[dept] = counts.get(dept, 0) + 1
    return counts


def build_risk_indicators(
    users: Sequence[User],
    projects: Sequence[Project],
    tasks: Sequence[Task],
    now: datetime,
    stagnant_days: int = 30,
) -> RiskIndicators:
    today = now.date()
    cutoff = now - timedelta(days=stagnant_days)
    departments = {u.emp_id: u.department for u in users}

    def last_update(p: Project) -> datetime | None:
        return as_utc(p.updated_at or p.created_at)

    stagnant = [
        p
        for p in projects
        if p.status != "completed" and last_update(p) is not None and last_update(p) < cutoff
    ]
    stagnant.sort(key=last_update)

    overdue = [t for t in tasks if is_overdue(t, today)]
    backlog = [
        t for t in tasks if is_active(t) and (t.priority or 0) >= HIGH_PRIORITY_THRESHOLD
    ]

    return RiskIndicators(
        stagnant_projects=StagnantProjects(
            count=len(stagnant),
            items=[StagnantProject.model_validate(p) for p in stagnant[:STAGNANT_LIST_LIMIT]],
            risk_level=risk_level(len(stagnant), 5, 2),
        ),
        overdue_tasks=OverdueRisk(
            count=len(overdue),
            high_priority_overdue=sum(
                1 for t in overdue if (t.priority or 0) >= HIGH_PRIORITY_THRESHOLD
            ),
            by_department=_by_department(overdue, departments),
            risk_level=risk_level(len(overdue), 20, 10),
        ),
        high_priority_backlog=BacklogRisk(
            count=len(backlog),
            ongoing=sum(1 for t in backlog if t.status == "ongoing"),
            under_review=sum(1 for t in backlog if t.status == "under review"),
            by_department=_by_department(backlog, departments),
            risk_level=risk_level(len(backlog), 15, 8),
        ),
    )


def build_collaboration(users: Sequence[User], projects: Sequence[Project]) -> CollaborationResponse:
    """Projects whose members come from more than one department."""
    departments = {u.emp_id: u.department for u in users}
    cross = []
    for project in projects:
        members = list(project.members or [])
        if len(members) < 2:
            continue
        depts: list[str] = []
        for emp_id in members:
            dept = departments.get(emp_id)
            if dept and dept not in depts:
                depts.append(dept)
        if len(depts) > 1:
            cross.append(
                CrossDepartmentProject(
                    id=project.id,
                    title=project.title,
                    owner_id=project.owner_id,
                    members=members,
                    status=project.status,
                    department_count=len(depts),
                    departments=depts,
                )
            )

    average = 0.0
    if cross:
        average = round_half_up(sum(p.department_count for p in cross) / len(cross), 1)
    return CollaborationResponse(
        cross_departmental_projects=cross,
        collaboration_metrics=CollaborationMetrics(
            total_projects=len(projects),
            cross_dept_projects=len(cross),
            collaboration_rate=percentage(len(cross), len(projects)),
            average_departments_per_project=average,
        ),
    )

"""Team workload rollup for managers: per-member owned/collaboration tasks with due-date flags."""

from collections.abc import Sequence
from datetime import date, timedelta

from app.models import DepartmentTeam, Task, User
from app.schemas.common import TASK_STATUS_VALUES
from app.schemas.teams import (
    MemberWorkload,
    TeamOut,
    WorkloadResponse,
    WorkloadSummary,
    WorkloadTask,
)
from app.schemas.users import UserListItem
from app.services.metrics import is_completed, is_overdue, to_date


def team_member_ids(teams: Sequence[DepartmentTeam]) -> list[str]:
    """Unique member emp_ids across teams, first-seen order."""
    ids: list[str] = []
    for team in teams:
        for emp_id in team.member_ids or []:
            if emp_id not in ids:
                ids.append(emp_id)
    return ids


def annotate_task(task: Task, today: date, due_soon_days: int) -> WorkloadTask:
    """Copy a task into the workload view with due_soon / overdue flags."""
    overdue = is_overdue(task, today)
    due = to_date(task.due_date)
    due_soon = (
        not overdue
        and due is not None
        and today <= due <= today + timedelta(days=due_soon_days)
    )
    item = WorkloadTask.model_validate(task)
    item.overdue = overdue
    item.due_soon = due_soon
    return item


def build_team_workload(
    teams: Sequence[DepartmentTeam],
    members: Sequence[User],
    tasks: Sequence[Task],
    today: date,
    due_soon_days: int = 3,
) -> WorkloadResponse:
    """
    Reduce tasks into per-member workload.

    Completed tasks are ignored. A task counts once per member: as owned when the
    member is the owner, otherwise as a collaboration task.
    """
    workload: dict[str, MemberWorkload] = {}
    for member in members:
        workload[member.emp_id] = MemberWorkload(
            member_info=UserListItem.model_validate(member),
            task_status_breakdown={status: 0 for status in sorted(TASK_STATUS_VALUES)},
        )

    for task in tasks:
        if is_completed(task):
            continue
        collaborators = set(task.collaborators or [])
        item = None
        for emp_id, entry in workload.items():
            is_owner = task.owner_id == emp_id
            if not is_owner and emp_id not in collaborators:
                continue
            if item is None:
                item = annotate_task(task, today, due_soon_days)
            if is_owner:
                entry.owned_tasks.append(item)
            else:
                entry.collaboration_tasks.append(item)
            entry.total_tasks += 1
            if item.due_soon:
                entry.due_soon_count += 1
            if item.overdue:
                entry.overdue_count += 1
            if task.status in entry.task_status_breakdown:
                entry.task_status_breakdown[task.status] += 1

    summary = WorkloadSummary(
        total_members=len(workload),
        total_tasks=sum(m.total_tasks for m in workload.values()),
        due_soon=sum(m.due_soon_count for m in workload.values()),
        overdue=sum(m.overdue_count for m in workload.values()),
    )
    return WorkloadResponse(
        workload=workload,
        summary=summary,
        teams=[TeamOut.model_validate(t) for t in teams],
    )

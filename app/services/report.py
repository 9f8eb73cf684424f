"""Project status report: task stats, status groups and due-date ordering for one project."""

from collections.abc import Sequence
from datetime import date

from app.models import Project, Task
from app.schemas.projects import ProjectOut
from app.schemas.report import ProjectReport, ProjectReportSummary, ProjectStats, TasksByStatus
from app.schemas.tasks import TaskSummary
from app.services.metrics import is_overdue


def _status(task: Task) -> str:
    return (task.status or "").lower()


def project_stats(tasks: Sequence[Task], today: date) -> ProjectStats:
    return ProjectStats(
        total=len(tasks),
        completed=sum(1 for t in tasks if _status(t) == "completed"),
        ongoing=sum(1 for t in tasks if _status(t) == "ongoing"),
        under_review=sum(1 for t in tasks if _status(t) == "under review"),
        overdue=sum(1 for t in tasks if is_overdue(t, today)),
    )


def group_tasks_by_status(tasks: Sequence[Task]) -> TasksByStatus:
    groups = TasksByStatus()
    buckets = {
        "completed": groups.completed,
        "under review": groups.under_review,
        "ongoing": groups.ongoing,
        "unassigned": groups.unassigned,
    }
    for task in tasks:
        bucket = buckets.get(_status(task))
        if bucket is not None:
            bucket.append(TaskSummary.model_validate(task))
    return groups


def sort_by_due_date(tasks: Sequence[Task]) -> list[Task]:
    """Earliest due first; tasks without a due date go last."""
    return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or date.min, t.id or 0))


def build_project_report(project: Project, tasks: Sequence[Task], today: date) -> ProjectReport:
    return ProjectReport(
        project=ProjectOut.model_validate(project),
        stats=project_stats(tasks, today),
        tasks_by_status=group_tasks_by_status(tasks),
        sorted_tasks=[TaskSummary.model_validate(t) for t in sort_by_due_date(tasks)],
        has_data=len(tasks) > 0,
    )


def build_project_summaries(
    projects: Sequence[Project],
    tasks: Sequence[Task],
    today: date,
) -> list[ProjectReportSummary]:
    by_project: dict[int, list[Task]] = {p.id: [] for p in projects}
    for task in tasks:
        if task.project_id in by_project:
            by_project[task.project_id].append(task)
    return [
        ProjectReportSummary(
            project=ProjectOut.model_validate(p),
            stats=project_stats(by_project[p.id], today),
        )
        for p in projects
    ]

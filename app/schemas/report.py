"""Schemas for project status reports."""

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.projects import ProjectOut
from app.schemas.tasks import TaskSummary


class ProjectStats(CamelModel):
    total: int = 0
    completed: int = 0
    ongoing: int = 0
    under_review: int = 0
    overdue: int = 0


class TasksByStatus(CamelModel):
    completed: list[TaskSummary] = Field(default_factory=list)
    under_review: list[TaskSummary] = Field(default_factory=list)
    ongoing: list[TaskSummary] = Field(default_factory=list)
    unassigned: list[TaskSummary] = Field(default_factory=list)


class ProjectReport(CamelModel):
    project: ProjectOut
    stats: ProjectStats
    tasks_by_status: TasksByStatus
    sorted_tasks: list[TaskSummary]
    has_data: bool


class ProjectReportSummary(CamelModel):
    project: ProjectOut
    stats: ProjectStats

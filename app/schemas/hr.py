"""Response schemas for the HR dashboard (camelCase on the wire)."""

from datetime import date, datetime

from pydantic import Field

from app.schemas.common import CamelModel


class EmployeeStats(CamelModel):
    emp_id: str = Field(..., alias="emp_id")
    name: str
    email: str
    department: str | None = None
    role: str
    created_at: datetime | None = Field(default=None, alias="created_at")
    total_tasks: int
    completed_tasks: int


class HrInsights(CamelModel):
    total_employees: int
    department_breakdown: dict[str, int]
    total_tasks: int
    overdue_tasks: int
    task_completion_rate: int
    total_projects: int
    active_projects: int


class EmployeePerformance(CamelModel):
    emp_id: str = Field(..., alias="emp_id")
    name: str
    department: str | None = None
    role: str
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    completion_rate: int


class DepartmentLoad(CamelModel):
    name: str
    members: int
    active: int
    overdue: int


class PerformanceRanking(CamelModel):
    emp_id: str = Field(..., alias="emp_id")
    name: str
    department: str | None = None
    total_tasks: int
    completed_tasks: int
    overdue_rate: float
    performance_score: float


class TrendPoint(CamelModel):
    period: str
    total: int
    completed: int


class ProductivityReportRow(CamelModel):
    id: int
    title: str
    status: str
    priority: int | None = None
    due_date: date | None = Field(default=None, alias="due_date")
    created_at: datetime | None = Field(default=None, alias="created_at")
    owner_id: str | None = Field(default=None, alias="owner_id")
    owner_name: str | None = None
    owner_department: str | None = None


class DepartmentReportRow(CamelModel):
    department: str
    role: str
    created_at: datetime | None = Field(default=None, alias="created_at")

"""Response schemas for the director dashboard (camelCase on the wire)."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

RiskLevel = Literal["low", "medium", "high"]
WorkloadLevel = Literal["underutilized", "moderate", "optimal", "overloaded"]


class CompanyKPIs(CamelModel):
    total_employees: int
    total_projects: int
    total_tasks: int
    system_activity: int


class ProjectPortfolio(CamelModel):
    total: int
    active: int
    completed: int
    on_hold: int
    completion_rate: int


class TaskMetrics(CamelModel):
    total: int
    active: int
    completed: int
    overdue: int
    completion_rate: int


class DirectorOverview(CamelModel):
    # "companyKPIs" does not follow the generated camelCase ("companyKpis").
    company_kpis: CompanyKPIs = Field(..., alias="companyKPIs")
    project_portfolio: ProjectPortfolio
    task_metrics: TaskMetrics


class DepartmentPerformance(CamelModel):
    name: str
    employee_count: int
    task_completion_rate: int
    project_completion_rate: int
    tasks_per_employee: float
    productivity_score: int
    total_tasks: int
    total_projects: int


class DepartmentPerformanceResponse(CamelModel):
    departments: list[DepartmentPerformance]


class EmployeeWorkload(CamelModel):
    emp_id: str = Field(..., alias="emp_id")
    name: str
    department: str | None = None
    role: str
    total_tasks: int
    active_tasks: int
    overdue_tasks: int
    high_priority_tasks: int
    workload_level: WorkloadLevel
    workload_score: int


class DepartmentWorkload(CamelModel):
    name: str
    total_employees: int = 0
    total_active_tasks: int = 0
    average_workload: float = 0.0
    overloaded_employees: int = 0
    underutilized_employees: int = 0


class ResourceSummary(CamelModel):
    total_employees: int
    overloaded_count: int
    underutilized_count: int
    optimal_count: int


class ResourceAllocation(CamelModel):
    employee_workloads: list[EmployeeWorkload]
    department_workloads: list[DepartmentWorkload]
    summary: ResourceSummary


class StagnantProject(CamelModel):
    id: int
    title: str
    status: str
    updated_at: datetime | None = Field(default=None, alias="updated_at")
    created_at: datetime | None = Field(default=None, alias="created_at")


class StagnantProjects(CamelModel):
    count: int
    items: list[StagnantProject]
    risk_level: RiskLevel


class OverdueRisk(CamelModel):
    count: int
    high_priority_overdue: int
    by_department: dict[str, int]
    risk_level: RiskLevel


class BacklogRisk(CamelModel):
    count: int
    ongoing: int
    under_review: int
    by_department: dict[str, int]
    risk_level: RiskLevel


class RiskIndicators(CamelModel):
    stagnant_projects: StagnantProjects
    overdue_tasks: OverdueRisk
    high_priority_backlog: BacklogRisk


class CrossDepartmentProject(CamelModel):
    id: int
    title: str
    owner_id: str | None = Field(default=None, alias="owner_id")
    members: list[str]
    status: str
    department_count: int
    departments: list[str]


class CollaborationMetrics(CamelModel):
    total_projects: int
    cross_dept_projects: int
    collaboration_rate: int
    average_departments_per_project: float


class CollaborationResponse(CamelModel):
    cross_departmental_projects: list[CrossDepartmentProject]
    collaboration_metrics: CollaborationMetrics

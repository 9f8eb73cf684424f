"""Schemas for department team endpoints (manager view of teams and workload)."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import ORMModel
from app.schemas.users import UserListItem


class TeamOut(ORMModel):
    id: int
    department: str
    team_name: str
    member_ids: list[str] = Field(default_factory=list)
    manager_ids: list[str] = Field(default_factory=list)

    @field_validator("member_ids", "manager_ids", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v or []


class TeamWithMembers(TeamOut):
    members: list[UserListItem] = Field(default_factory=list)


class MyTeamResponse(BaseModel):
    teams: list[TeamWithMembers]
    message: str | None = None


class WorkloadTask(ORMModel):
    id: int
    title: str
    status: str
    priority: int | None = None
    due_date: date | None = None
    project_id: int | None = None
    owner_id: str | None = None
    collaborators: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    due_soon: bool = False
    overdue: bool = False

    @field_validator("collaborators", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v or []


class MemberWorkload(BaseModel):
    member_info: UserListItem
    owned_tasks: list[WorkloadTask] = Field(default_factory=list)
    collaboration_tasks: list[WorkloadTask] = Field(default_factory=list)
    total_tasks: int = 0
    due_soon_count: int = 0
    overdue_count: int = 0
    task_status_breakdown: dict[str, int] = Field(default_factory=dict)


class WorkloadSummary(BaseModel):
    total_members: int = 0
    total_tasks: int = 0
    due_soon: int = 0
    overdue: int = 0


class WorkloadResponse(BaseModel):
    workload: dict[str, MemberWorkload] = Field(default_factory=dict)
    summary: WorkloadSummary = Field(default_factory=WorkloadSummary)
    teams: list[TeamOut] = Field(default_factory=list)

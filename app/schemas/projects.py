"""Schemas for project endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import ORMModel, ProjectStatus
from app.schemas.users import UserContact


def _member_ids(value: list[Any] | None) -> list[str]:
    """Accept emp_id strings or {emp_id: ...} objects; return de-duplicated emp_ids in order."""
    if not value:
        return []
    out: list[str] = []
    for member in value:
        if isinstance(member, dict):
            member = member.get("emp_id")
        if member is None:
            continue
        emp_id = str(member).strip()
        if emp_id and emp_id not in out:
            out.append(emp_id)
    return out


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus = "active"
    members: list[str] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def normalize_members(cls, v: list[Any] | None) -> list[str]:
        return _member_ids(v)


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: ProjectStatus | None = None
    members: list[str] | None = None

    @field_validator("members", mode="before")
    @classmethod
    def normalize_members(cls, v: list[Any] | None) -> list[str] | None:
        if v is None:
            return None
        return _member_ids(v)


class ProjectOut(ORMModel):
    id: int
    title: str
    description: str | None = None
    owner_id: str | None = None
    status: str
    members: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("members", mode="before")
    @classmethod
    def none_to_empty(cls, v: list[str] | None) -> list[str]:
        return v or []


class ProjectMembersResponse(BaseModel):
    members: list[UserContact]


class MessageResponse(BaseModel):
    message: str

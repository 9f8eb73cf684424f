"""Schemas for the users directory endpoints."""

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import ORMModel, normalize_email, normalize_role


class UserContact(ORMModel):
    """Minimal public view of an employee."""

    emp_id: str
    name: str
    email: str


class UserListItem(UserContact):
    role: str
    department: str | None = None


class UserProfile(UserContact):
    """Profile view; department and role are only filled for privileged viewers or self."""

    department: str | None = None
    role: str | None = None


class UsersListResponse(BaseModel):
    users: list[UserListItem]


class UsersBulkRequest(BaseModel):
    emp_ids: list[str] = Field(..., max_length=1000)


class EmployeeUpdate(BaseModel):
    """HR edit of an employee record. Only fields that are sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    department: str | None = Field(default=None, max_length=255)
    role: str | None = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_role(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_email(v)

"""Shared literals and base models used across request/response schemas."""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Role = Literal["staff", "manager", "director", "hr"]
ROLE_VALUES: frozenset[str] = frozenset({"staff", "manager", "director", "hr"})

TaskStatus = Literal["ongoing", "under review", "completed"]
TASK_STATUS_VALUES: frozenset[str] = frozenset({"ongoing", "under review", "completed"})
# Statuses that count as work in flight for workload and KPI reporting.
ACTIVE_TASK_STATUSES: frozenset[str] = frozenset({"ongoing", "under review"})
COMPLETED = "completed"

ProjectStatus = Literal["active", "completed", "on-hold"]

RecurrencePattern = Literal["daily", "weekly", "biweekly", "monthly", "quarterly", "yearly"]

# Priority is 1-10; this and above counts as "high" in risk reporting.
HIGH_PRIORITY_THRESHOLD = 8

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: str) -> str:
    """Trim an email address; raise ValueError unless it looks like local@domain.tld."""
    email = (value or "").strip()
    if len(email) > 320 or not EMAIL_PATTERN.match(email):
        raise ValueError("must be a valid email address")
    return email


def normalize_role(value: str | None) -> str:
    """Lowercase and trim a role; raise ValueError if it is not one of the known roles."""
    role = (value or "").strip().lower()
    if role not in ROLE_VALUES:
        raise ValueError(f"role must be one of {sorted(ROLE_VALUES)}, got {value!r}")
    return role


class ORMModel(BaseModel):
    """Response model readable straight from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys (dashboard reporting payloads)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

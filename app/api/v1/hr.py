"""HR dashboard: employee directory with stats, insights, reports and analytics."""

import logging
from datetime import date, datetime, time, timezone
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.auth import require_roles
from app.core.database import get_db
from app.models import Project, Task, User
from app.schemas.auth import CurrentUser
from app.schemas.hr import (
    DepartmentLoad,
    DepartmentReportRow,
    EmployeePerformance,
    EmployeeStats,
    HrInsights,
    PerformanceRanking,
    ProductivityReportRow,
    TrendPoint,
)
from app.schemas.users import EmployeeUpdate, UserListItem
from app.services.hr import (
    build_department_loads,
    build_department_report,
    build_employee_stats,
    build_insights,
    build_performance,
    build_performance_rankings,
    build_productivity_report,
    build_trends,
)

logger = logging.getLogger(__name__)
router = APIRouter()

require_hr = require_roles("hr", "director")

REPORT_DEFAULT_START = date(2024, 1, 1)


def _today() -> date:
    return datetime.now(timezone.utc).date()


@router.get("/employees", response_model=list[EmployeeStats])
def employees(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> list[EmployeeStats]:
    return build_employee_stats(db.query(User).order_by(User.name).all(), db.query(Task).all())


@router.get("/insights", response_model=HrInsights)
def insights(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> HrInsights:
    return build_insights(
        db.query(User).all(), db.query(Project).all(), db.query(Task).all(), today=_today()
    )


@router.get("/performance", response_model=list[EmployeePerformance])
def performance(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> list[EmployeePerformance]:
    return build_performance(db.query(User).order_by(User.name).all(), db.query(Task).all(), today=_today())


@router.get(
    "/reports/{report_type}",
    response_model=list[ProductivityReportRow] | list[DepartmentReportRow],
)
def report(
    report_type: str,
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
) -> list[ProductivityReportRow] | list[DepartmentReportRow]:
    """
    productivity: tasks created between startDate (default 2024-01-01) and endDate
    (default now) with owner name and department. department: department, role and
    join date of every staffed employee.
    """
    if report_type == "productivity":
        start = datetime.combine(start_date or REPORT_DEFAULT_START, time.min, tzinfo=timezone.utc)
        end = end_date or datetime.now(timezone.utc)
        tasks = (
            db.query(Task)
            .filter(Task.created_at >= start, Task.created_at <= end)
            .order_by(Task.created_at)
            .all()
        )
        owner_ids = {t.owner_id for t in tasks if t.owner_id}
        owners = db.query(User).filter(User.emp_id.in_(owner_ids)).all() if owner_ids else []
        return build_productivity_report(tasks, owners)
    if report_type == "department":
        return build_department_report(db.query(User).filter(User.department.isnot(None)).all())
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid report type")


@router.put("/employees/{emp_id}", response_model=UserListItem)
def update_employee(
    emp_id: str,
    body: EmployeeUpdate,
    hr_user: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    user = db.query(User).filter(User.emp_id == emp_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in updates.items():
        setattr(user, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from e
    db.refresh(user)
    logger.info(
        "Employee updated",
        extra={"emp_id": emp_id, "fields": sorted(updates), "updated_by": hr_user.emp_id},
    )
    return user


@router.get("/departments", response_model=list[DepartmentLoad])
def department_loads(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> list[DepartmentLoad]:
    return build_department_loads(db.query(User).all(), db.query(Task).all(), today=_today())


@router.get("/analytics/performance-rankings", response_model=list[PerformanceRanking])
def performance_rankings(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
) -> list[PerformanceRanking]:
    return build_performance_rankings(db.query(User).all(), db.query(Task).all(), today=_today())


@router.get("/analytics/trends", response_model=list[TrendPoint])
def trends(
    _hr: Annotated[CurrentUser, Depends(require_hr)],
    db: Annotated[Session, Depends(get_db)],
    period: Literal["monthly", "weekly"] = "monthly",
) -> list[TrendPoint]:
    tasks = db.query(Task).order_by(Task.created_at).all()
    return build_trends(tasks, period)

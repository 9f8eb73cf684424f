"""Director dashboard: company KPIs, department performance, resources, risks, collaboration."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import require_roles
from app.core.config import get_settings
from app.core.database import get_db
from app.models import Project, Task, User
from app.schemas.auth import CurrentUser
from app.schemas.director import (
    CollaborationResponse,
    DepartmentPerformanceResponse,
    DirectorOverview,
    ResourceAllocation,
    RiskIndicators,
)
from app.services.director import (
    build_collaboration,
    build_department_performance,
    build_overview,
    build_resource_allocation,
    build_risk_indicators,
)

router = APIRouter()

require_director = require_roles("director")


def _overview(db: Session) -> DirectorOverview:
    return build_overview(
        db.query(User).all(),
        db.query(Project).all(),
        db.query(Task).all(),
        now=datetime.now(timezone.utc),
        activity_days=get_settings().RECENT_ACTIVITY_DAYS,
    )


@router.get("/overview", response_model=DirectorOverview)
def overview(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> DirectorOverview:
    return _overview(db)


@router.get("/kpis", response_model=DirectorOverview)
def kpis(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> DirectorOverview:
    return _overview(db)


@router.get("/departments", response_model=DepartmentPerformanceResponse)
def departments(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> DepartmentPerformanceResponse:
    return DepartmentPerformanceResponse(
        departments=build_department_performance(
            db.query(User).all(), db.query(Project).all(), db.query(Task).all()
        )
    )


@router.get("/resources", response_model=ResourceAllocation)
def resources(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> ResourceAllocation:
    return build_resource_allocation(
        db.query(User).all(), db.query(Task).all(), now=datetime.now(timezone.utc)
    )


@router.get("/risks", response_model=RiskIndicators)
def risks(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> RiskIndicators:
    return build_risk_indicators(
        db.query(User).all(),
        db.query(Project).all(),
        db.query(Task).all(),
        now=datetime.now(timezone.utc),
        stagnant_days=get_settings().STAGNANT_PROJECT_DAYS,
    )


@router.get("/collaboration", response_model=CollaborationResponse)
def collaboration(
    _director: Annotated[CurrentUser, Depends(require_director)],
    db: Annotated[Session, Depends(get_db)],
) -> CollaborationResponse:
    return build_collaboration(db.query(User).all(), db.query(Project).all())

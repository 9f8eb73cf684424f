"""Project status reports (JSON; rendering to PDF is left to the client)."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Project, Task
from app.schemas.auth import CurrentUser
from app.schemas.report import ProjectReport, ProjectReportSummary
from app.services.access import accessible_projects, has_project_access
from app.services.report import build_project_report, build_project_summaries

router = APIRouter()


@router.get("/projects", response_model=list[ProjectReportSummary])
def list_project_reports(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[ProjectReportSummary]:
    projects = accessible_projects(db, current_user).order_by(Project.created_at.desc()).all()
    if not projects:
        return []
    tasks = db.query(Task).filter(Task.project_id.in_([p.id for p in projects])).all()
    return build_project_summaries(projects, tasks, datetime.now(timezone.utc).date())


@router.get("/projects/{project_id}", response_model=ProjectReport)
def project_report(
    project_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProjectReport:
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not has_project_access(current_user, project):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No access to this project")
    tasks = db.query(Task).filter(Task.project_id == project_id).all()
    return build_project_report(project, tasks, datetime.now(timezone.utc).date())

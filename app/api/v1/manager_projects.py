"""Manager-only project administration across the whole company."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import require_roles
from app.api.v1.projects import create_project
from app.core.database import get_db
from app.models import Project
from app.schemas.auth import CurrentUser
from app.schemas.projects import MessageResponse, ProjectCreate, ProjectOut

logger = logging.getLogger(__name__)
router = APIRouter()

require_manager = require_roles("manager")


@router.get("/all", response_model=list[ProjectOut])
def all_projects(
    _manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Project]:
    return db.query(Project).order_by(Project.created_at.desc()).all()


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def manager_create_project(
    body: ProjectCreate,
    manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> Project:
    return create_project(db, body, manager.emp_id)


@router.delete("/{project_id}", response_model=MessageResponse)
def manager_delete_project(
    project_id: int,
    manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    db.delete(project)
    db.commit()
    logger.info(
        "Project deleted by manager",
        extra={"project_id": project_id, "manager_emp_id": manager.emp_id},
    )
    return MessageResponse(message="Project deleted successfully")

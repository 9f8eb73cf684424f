"""Projects the caller owns or is a member of."""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Project, User
from app.schemas.auth import CurrentUser
from app.schemas.projects import (
    MessageResponse,
    ProjectCreate,
    ProjectMembersResponse,
    ProjectOut,
    ProjectUpdate,
)
from app.schemas.users import UserContact
from app.services.access import owner_or_member

logger = logging.getLogger(__name__)
router = APIRouter()

# An explicit null for these leaves the column unchanged.
NOT_NULL_FIELDS = ("title", "status")


def create_project(db: Session, body: ProjectCreate, owner_id: str) -> Project:
    project = Project(
        title=body.title.strip(),
        description=body.description,
        status=body.status,
        members=body.members,
        owner_id=owner_id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project created", extra={"project_id": project.id, "owner_id": owner_id})
    return project


def _get_owned_project(db: Session, project_id: int, emp_id: str, action: str) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.owner_id != emp_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this project",
        )
    return project


@router.get("", response_model=list[ProjectOut])
def list_projects(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Project]:
    return (
        db.query(Project)
        .filter(owner_or_member(current_user.emp_id))
        .order_by(Project.created_at.desc())
        .all()
    )


@router.get("/names", response_model=dict[int, str])
def project_names(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict[int, str]:
    """Map of project id to title for dropdowns."""
    rows = (
        db.query(Project.id, Project.title)
        .filter(owner_or_member(current_user.emp_id))
        .all()
    )
    return {row.id: row.title for row in rows}


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def post_project(
    body: ProjectCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Project:
    return create_project(db, body, current_user.emp_id)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    body: ProjectUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Project:
    project = _get_owned_project(db, project_id, current_user.emp_id, "update")
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None:
            if field in NOT_NULL_FIELDS:
                continue
            if field == "members":
                value = []
        setattr(project, field, value)
    project.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(project)
    return project


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    project = _get_owned_project(db, project_id, current_user.emp_id, "delete")
    db.delete(project)
    db.commit()
    logger.info("Project deleted", extra={"project_id": project_id})
    return MessageResponse(message="Project deleted successfully")


@router.get("/{project_id}/members", response_model=ProjectMembersResponse)
def project_members(
    project_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProjectMembersResponse:
    """Members plus owner, without the caller."""
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    ids = list(project.members or [])
    if project.owner_id and project.owner_id not in ids:
        ids.append(project.owner_id)
    ids = [i for i in ids if i != current_user.emp_id]
    if not ids:
        return ProjectMembersResponse(members=[])
    users = db.query(User).filter(User.emp_id.in_(ids)).all()
    return ProjectMembersResponse(members=[UserContact.model_validate(u) for u in users])

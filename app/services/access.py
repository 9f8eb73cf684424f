"""Who may see which projects."""

from collections.abc import Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from app.models import Project
from app.schemas.auth import CurrentUser

# Roles that may read every project.
SEE_ALL_PROJECTS_ROLES = frozenset({"director", "hr"})


def owner_or_member(emp_id: str):
    """SQL filter: the employee owns the project or is listed in its members."""
    return or_(Project.owner_id == emp_id, Project.members.any(emp_id))


def has_project_access(user: CurrentUser, project: Project) -> bool:
    """Director and HR see every project; everyone else must own it or be a member."""
    if (user.role or "").lower() in SEE_ALL_PROJECTS_ROLES:
        return True
    return project.owner_id == user.emp_id or user.emp_id in (project.members or [])


def accessible_projects(db: Session, user: CurrentUser) -> Query:
    query = db.query(Project)
    if (user.role or "").lower() in SEE_ALL_PROJECTS_ROLES:
        return query
    return query.filter(owner_or_member(user.emp_id))


def filter_accessible_project_ids(db: Session, user: CurrentUser, project_ids: Iterable[int]) -> list[int]:
    """Subset of project_ids the user may read, in ascending id order."""
    ids = sorted(set(project_ids))
    if not ids:
        return []
    rows = accessible_projects(db, user).filter(Project.id.in_(ids)).with_entities(Project.id).all()
    return sorted(row[0] for row in rows)

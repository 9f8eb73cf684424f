"""Employee directory: list, search, bulk lookup and profiles."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import User
from app.schemas.auth import CurrentUser
from app.schemas.users import (
    UserContact,
    UserListItem,
    UserProfile,
    UsersBulkRequest,
    UsersListResponse,
)

router = APIRouter()

SEARCH_LIMIT = 10
# Roles that see department and role on other employees' profiles.
PROFILE_DETAIL_ROLES = frozenset({"manager", "director", "hr"})


@router.get("", response_model=UsersListResponse)
def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    roles: Annotated[str | None, Query(description="Comma-separated roles to include")] = None,
    exclude_self: bool = False,
) -> UsersListResponse:
    query = db.query(User)
    if roles:
        wanted = [r.strip().lower() for r in roles.split(",") if r.strip()]
        if wanted:
            query = query.filter(User.role.in_(wanted))
    if exclude_self:
        query = query.filter(User.emp_id != current_user.emp_id)
    users = query.order_by(User.name).all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.get("/search", response_model=list[UserContact])
def search_users(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    q: str = "",
) -> list[UserContact]:
    """Case-insensitive name search; a blank query returns an empty list."""
    term = q.strip()
    if not term:
        return []
    users = db.query(User).filter(User.name.ilike(f"%{term}%")).limit(SEARCH_LIMIT).all()
    return [UserContact.model_validate(u) for u in users]


@router.post("/bulk", response_model=list[UserContact])
def bulk_users(
    body: UsersBulkRequest,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserContact]:
    if not body.emp_ids:
        return []
    users = db.query(User).filter(User.emp_id.in_(body.emp_ids)).all()
    return [UserContact.model_validate(u) for u in users]


@router.get("/profile/{emp_id}", response_model=UserProfile)
def get_profile(
    emp_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserProfile:
    user = db.query(User).filter(User.emp_id == emp_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    profile = UserProfile(emp_id=user.emp_id, name=user.name, email=user.email)
    if current_user.role in PROFILE_DETAIL_ROLES or current_user.emp_id == user.emp_id:
        profile.department = user.department
        profile.role = user.role
    return profile

"""Teams the caller manages, with member details and workload."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import DepartmentTeam, Task, User
from app.schemas.auth import CurrentUser
from app.schemas.teams import MyTeamResponse, TeamOut, TeamWithMembers, WorkloadResponse
from app.schemas.users import UserListItem
from app.services.workload import build_team_workload, team_member_ids

router = APIRouter()


def _managed_teams(db: Session, emp_id: str) -> list[DepartmentTeam]:
    return (
        db.query(DepartmentTeam)
        .filter(DepartmentTeam.manager_ids.any(emp_id))
        .order_by(DepartmentTeam.id)
        .all()
    )


@router.get("/my-team", response_model=MyTeamResponse)
def my_team(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MyTeamResponse:
    """Teams listing the caller as a manager; members resolved to users, unknown ids dropped."""
    teams = _managed_teams(db, current_user.emp_id)
    if not teams:
        return MyTeamResponse(teams=[], message="No teams found for this manager")

    member_ids = team_member_ids(teams)
    users: dict[str, User] = {}
    if member_ids:
        for user in db.query(User).filter(User.emp_id.in_(member_ids)).all():
            users[user.emp_id] = user

    result = []
    for team in teams:
        item = TeamWithMembers.model_validate(team)
        item.members = [
            UserListItem.model_validate(users[m]) for m in (team.member_ids or []) if m in users
        ]
        result.append(item)
    return MyTeamResponse(teams=result)


@router.get("/workload", response_model=WorkloadResponse)
def team_workload(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> WorkloadResponse:
    """Open owned and collaboration tasks per member across the caller's teams."""
    teams = _managed_teams(db, current_user.emp_id)
    member_ids = team_member_ids(teams)
    if not member_ids:
        return WorkloadResponse(teams=[TeamOut.model_validate(t) for t in teams])

    members = (
        db.query(User)
        .filter(User.emp_id.in_(member_ids))
        .order_by(User.name)
        .all()
    )
    tasks = (
        db.query(Task)
        .filter(
            Task.status != "completed",
            (Task.owner_id.in_(member_ids)) | (Task.collaborators.overlap(member_ids)),
        )
        .all()
    )
    return build_team_workload(
        teams,
        members,
        tasks,
        today=date.today(),
        due_soon_days=get_settings().DUE_SOON_DAYS,
    )

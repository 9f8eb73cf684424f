"""Tasks: CRUD for the caller's tasks, project task lists, recurrence series and edit history."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import Project, Task, User
from app.schemas.auth import CurrentUser
from app.schemas.common import COMPLETED
from app.schemas.tasks import (
    OkResponse,
    TaskCreate,
    TaskHistoryEntry,
    TaskManager,
    TaskOut,
    TasksBulkRequest,
    TaskSummary,
    TasksListResponse,
    TaskUpdate,
    TaskUpdateResponse,
)
from app.services.access import filter_accessible_project_ids, has_project_access
from app.services.recurrence import (
    RecurrenceError,
    create_recurring_task,
    get_recurrence_instances,
    handle_task_completion,
)
from app.services.task_history import list_task_history, record_task_history

logger = logging.getLogger(__name__)
router = APIRouter()

NOT_NULL_FIELDS = ("title", "status")


def _visible_to(emp_id: str):
    """SQL filter: the employee owns the task or collaborates on it."""
    return or_(Task.owner_id == emp_id, Task.collaborators.any(emp_id))


def _can_view(task: Task, emp_id: str) -> bool:
    return task.owner_id == emp_id or emp_id in (task.collaborators or [])


def _get_owned_task(db: Session, task_id: int, emp_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.owner_id == emp_id).first()
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _with_managers(db: Session, tasks: list[Task]) -> list[TaskOut]:
    """Attach each task owner's {emp_id, name, department} as `manager`."""
    owner_ids = {t.owner_id for t in tasks if t.owner_id}
    managers: dict[str, TaskManager] = {}
    if owner_ids:
        for user in db.query(User).filter(User.emp_id.in_(owner_ids)).all():
            managers[user.emp_id] = TaskManager.model_validate(user)
    out = []
    for task in tasks:
        item = TaskOut.model_validate(task)
        item.manager = managers.get(task.owner_id)
        out.append(item)
    return out


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Task:
    """Create a task owned by the caller. With is_recurring it starts a new series."""
    data = body.model_dump(exclude_none=True)
    data["collaborators"] = data.get("collaborators") or []
    if body.is_recurring:
        return create_recurring_task(db, data, current_user.emp_id)

    for field in (
        "recurrence_pattern",
        "recurrence_interval",
        "recurrence_end_date",
        "recurrence_count",
        "recurrence_weekday",
    ):
        data.pop(field, None)
    data["is_recurring"] = False
    data.setdefault("status", "ongoing")
    task = Task(**data, owner_id=current_user.emp_id)
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task created", extra={"task_id": task.id, "owner_id": current_user.emp_id})
    return task


@router.get("", response_model=TasksListResponse)
def list_tasks(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TasksListResponse:
    """Tasks the caller owns or collaborates on, newest first, with the owner as `manager`."""
    tasks = (
        db.query(Task)
        .filter(_visible_to(current_user.emp_id))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    return TasksListResponse(tasks=_with_managers(db, tasks))


@router.put("/{task_id}", response_model=TaskUpdateResponse)
def update_task(
    task_id: int,
    body: TaskUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TaskUpdateResponse:
    """
    Owner-only partial update. Moving a recurring task to completed creates its
    next occurrence, returned as `next_task`.
    """
    task = _get_owned_task(db, task_id, current_user.emp_id)
    updates: dict[str, Any] = body.model_dump(exclude_unset=True)
    if "collaborators" in updates and updates["collaborators"] is None:
        updates["collaborators"] = []
    # An explicit null for a NOT NULL column leaves it unchanged.
    for field in NOT_NULL_FIELDS:
        if field in updates and updates[field] is None:
            del updates[field]

    was_completed = task.status == COMPLETED
    changes: dict[str, Any] = {}
    for field, value in updates.items():
        old = getattr(task, field)
        if old != value:
            changes[field] = {"from": old, "to": value}
            setattr(task, field, value)

    # The update and the next occurrence commit together; a recurrence error rolls both back.
    next_task = None
    if task.status == COMPLETED and not was_completed and task.is_recurring:
        try:
            next_task = handle_task_completion(db, task)
        except RecurrenceError as e:
            db.rollback()
            logger.error(
                "Could not create next occurrence",
                extra={"task_id": task_id, "reason": e.message},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    else:
        db.commit()
    db.refresh(task)

    if changes:
        record_task_history(db, task.id, current_user, "task_update", {"updates": changes})

    response = TaskUpdateResponse.model_validate(task)
    if next_task is not None:
        response.next_task = TaskOut.model_validate(next_task)
    return response


@router.delete("/{task_id}", response_model=OkResponse)
def delete_task(
    task_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> OkResponse:
    task = _get_owned_task(db, task_id, current_user.emp_id)
    db.delete(task)
    db.commit()
    return OkResponse()


@router.post("/bulk", response_model=list[TaskSummary])
def tasks_for_projects(
    body: TasksBulkRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Task]:
    """Task summaries for the given projects, skipping projects the caller cannot access."""
    project_ids = filter_accessible_project_ids(db, current_user, body.project_ids)
    if not project_ids:
        return []
    return db.query(Task).filter(Task.project_id.in_(project_ids)).order_by(Task.id).all()


@router.get("/project/{project_id}", response_model=list[TaskSummary])
def tasks_for_project(
    project_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Task]:
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not has_project_access(current_user, project):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No access to this project")
    return db.query(Task).filter(Task.project_id == project_id).order_by(Task.id).all()


@router.get("/recurrence/{series_id}", response_model=list[TaskOut])
def recurrence_series(
    series_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Task]:
    """All occurrences of a series, by due date, if the caller is on any of them."""
    tasks = get_recurrence_instances(db, series_id)
    if not any(_can_view(t, current_user.emp_id) for t in tasks):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recurrence series not found")
    return tasks


@router.get("/{task_id}/history", response_model=list[TaskHistoryEntry])
def task_history(
    task_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list:
    task = db.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    if not _can_view(task, current_user.emp_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: no access to this task")
    return list_task_history(db, task_id)

"""Subtasks under a task. Reads need owner or collaborator access; writes are owner only."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.models import SubTask, Task
from app.schemas.auth import CurrentUser
from app.schemas.tasks import (
    OkResponse,
    SubTaskCreate,
    SubTaskOut,
    SubTaskResponse,
    SubTasksResponse,
    SubTaskUpdate,
)
from app.services.task_history import record_task_history

router = APIRouter()


def _get_parent(db: Session, task_id: int) -> Task:
    parent = db.get(Task, task_id)
    if parent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent task not found")
    return parent


def _require_parent_owner(db: Session, subtask_id: int, emp_id: str, verb: str) -> SubTask:
    subtask = db.get(SubTask, subtask_id)
    if subtask is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subtask not found")
    parent = _get_parent(db, subtask.parent_task_id)
    if parent.owner_id != emp_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the task owner can {verb} subtasks",
        )
    return subtask


@router.get("/task/{task_id}", response_model=SubTasksResponse)
def list_subtasks(
    task_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> SubTasksResponse:
    parent = _get_parent(db, task_id)
    emp_id = current_user.emp_id
    if parent.owner_id != emp_id and emp_id not in (parent.collaborators or []):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: no access to this task")
    subtasks = (
        db.query(SubTask)
        .filter(SubTask.parent_task_id == task_id)
        .order_by(SubTask.priority.desc().nulls_last(), SubTask.id)
        .all()
    )
    return SubTasksResponse(subtasks=[SubTaskOut.model_validate(s) for s in subtasks])


@router.post("", response_model=SubTaskResponse, status_code=status.HTTP_201_CREATED)
def create_subtask(
    body: SubTaskCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> SubTaskResponse:
    parent = _get_parent(db, body.parent_task_id)
    if parent.owner_id != current_user.emp_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the task owner can add subtasks")
    subtask = SubTask(
        parent_task_id=parent.id,
        title=body.title,
        description=body.description,
        priority=body.priority,
        status=body.status or "ongoing",
        due_date=body.due_date,
        collaborators=body.collaborators,
        owner_id=parent.owner_id,
    )
    db.add(subtask)
    db.commit()
    db.refresh(subtask)
    record_task_history(
        db,
        parent.id,
        current_user,
        "subtask_create",
        {
            "subtask_id": subtask.id,
            "title": subtask.title,
            "priority": subtask.priority,
            "status": subtask.status,
            "due_date": subtask.due_date,
        },
    )
    return SubTaskResponse(subtask=SubTaskOut.model_validate(subtask))


@router.put("/{subtask_id}", response_model=SubTaskResponse)
def update_subtask(
    subtask_id: int,
    body: SubTaskUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> SubTaskResponse:
    """
    Invalid priorities and blank titles are ignored rather than applied; an empty
    description clears it.
    """
    subtask = _require_parent_owner(db, subtask_id, current_user.emp_id, "edit")
    updates: dict[str, Any] = body.model_dump(exclude_unset=True)
    if updates.get("priority", 0) is None:
        del updates["priority"]
    if "title" in updates and not updates["title"]:
        del updates["title"]
    if "description" in updates and not updates["description"]:
        updates["description"] = None
    if updates.get("status", "") is None:
        del updates["status"]
    if "collaborators" in updates and updates["collaborators"] is None:
        updates["collaborators"] = []
    for field, value in updates.items():
        setattr(subtask, field, value)
    db.commit()
    db.refresh(subtask)
    record_task_history(
        db,
        subtask.parent_task_id,
        current_user,
        "subtask_update",
        {"subtask_id": subtask.id, "updates": updates},
    )
    return SubTaskResponse(subtask=SubTaskOut.model_validate(subtask))


@router.delete("/{subtask_id}", response_model=OkResponse)
def delete_subtask(
    subtask_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> OkResponse:
    subtask = _require_parent_owner(db, subtask_id, current_user.emp_id, "delete")
    db.delete(subtask)
    db.commit()
    return OkResponse()

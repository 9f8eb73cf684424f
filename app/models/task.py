"""ORM models for tasks, their subtasks and the per-task edit history."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from app.models.base import Base


class Task(Base):
    """
    A task owned by one employee, optionally inside a project, with collaborators.

    Recurring tasks are ordinary rows carrying recurrence metadata; all rows of a
    series share recurrence_series_id and recurrence_count is the occurrence number.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("priority IS NULL OR priority BETWEEN 1 AND 10", name="ck_tasks_priority"),
        CheckConstraint(
            "recurrence_weekday IS NULL OR recurrence_weekday BETWEEN 0 AND 6",
            name="ck_tasks_recurrence_weekday",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Integer, nullable=True)
    due_date = Column(Date, nullable=True, index=True)
    project_id = Column(
        Integer,
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(String(32), nullable=False, default="ongoing", index=True)
    file = Column(Text, nullable=True)
    collaborators = Column(ARRAY(String(64)), nullable=False, default=list)
    owner_id = Column(
        String(64),
        ForeignKey("users.emp_id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(String(16), nullable=True)
    recurrence_interval = Column(Integer, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_count = Column(Integer, nullable=True)
    recurrence_max_count = Column(Integer, nullable=True)
    recurrence_weekday = Column(Integer, nullable=True)
    recurrence_series_id = Column(String(36), nullable=True, index=True)
    last_completed_date = Column(Date, nullable=True)


class SubTask(Base):
    """A checklist item under a parent task; owner_id mirrors the parent's owner."""

    __tablename__ = "sub_task"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Integer, nullable=True)
    status = Column(String(32), nullable=False, default="ongoing")
    due_date = Column(Date, nullable=True)
    collaborators = Column(ARRAY(String(64)), nullable=False, default=list)
    owner_id = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class TaskEditHistory(Base):
    """Audit row for an edit to a task or one of its subtasks."""

    __tablename__ = "task_edit_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    editor_emp_id = Column(String(64), nullable=True)
    editor_user_id = Column(String(36), nullable=True)
    action = Column(String(64), nullable=False)
    details = Column(JSONB, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

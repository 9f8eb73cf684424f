"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.department_team import DepartmentTeam
from app.models.notification import Notification
from app.models.project import Project
from app.models.task import SubTask, Task, TaskEditHistory
from app.models.user import User

__all__ = [
    "Base",
    "DepartmentTeam",
    "Notification",
    "Project",
    "SubTask",
    "Task",
    "TaskEditHistory",
    "User",
]

"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import (
    auth,
    department_teams,
    director,
    health,
    hr,
    manager_projects,
    notifications,
    projects,
    report,
    subtasks,
    tasks,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(manager_projects.router, prefix="/manager-projects", tags=["manager-projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(subtasks.router, prefix="/subtasks", tags=["subtasks"])
router.include_router(notifications.router, prefix="/notification", tags=["notification"])
router.include_router(department_teams.router, prefix="/department_teams", tags=["department_teams"])
router.include_router(director.router, prefix="/director", tags=["director"])
router.include_router(hr.router, prefix="/hr", tags=["hr"])
router.include_router(report.router, prefix="/report", tags=["report"])

"""ORM model for department teams (managers and members by emp_id)."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import ARRAY

from app.models.base import Base


class DepartmentTeam(Base):
    __tablename__ = "department_teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    department = Column(String(255), nullable=False, index=True)
    team_name = Column(String(255), nullable=False)
    member_ids = Column(ARRAY(String(64)), nullable=False, default=list)
    manager_ids = Column(ARRAY(String(64)), nullable=False, default=list)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

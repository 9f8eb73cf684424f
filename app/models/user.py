"""ORM model for employees (auth identity plus business profile)."""

from sqlalchemy import Column, DateTime, String, func

from app.models.base import Base


class User(Base):
    """
    One employee. `id` is the auth user id (UUID string) carried in the token's
    `sub`; `emp_id` is the human-readable business key used everywhere else
    (owner_id, members, collaborators, notifications).

    role: 'staff', 'manager', 'director' or 'hr'
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    emp_id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    department = Column(String(255), nullable=True, index=True)
    role = Column(String(32), nullable=False, default="staff")
    # Only set for AUTH_PROVIDER=local; the hosted auth service keeps its own credentials.
    password_hash = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

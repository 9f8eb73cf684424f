"""ORM model for in-app notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.models.base import Base


class Notification(Base):
    """A notification addressed to one employee, optionally linked to a task."""

    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "task_id",
            "emp_id",
            "type",
            "title",
            name="uniq_notifications_task_emp_type_title",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    emp_id = Column(String(64), nullable=False, index=True)
    recipient_id = Column(String(64), nullable=True)
    task_id = Column(
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type = Column(String(64), nullable=False)
    notification_category = Column(String(32), nullable=True)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

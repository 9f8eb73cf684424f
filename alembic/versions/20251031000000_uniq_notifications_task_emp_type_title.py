"""Unique notifications per (task_id, emp_id, type, title) so deadline checks stay idempotent.

Revision ID: 20251031000000
Revises: 20251020000000
Create Date: 2025-10-31

"""
from typing import Sequence, Union

from alembic import op

revision: str = "20251031000000"
down_revision: Union[str, None] = "20251020000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONSTRAINT_NAME = "uniq_notifications_task_emp_type_title"


def upgrade() -> None:
    # Keep the oldest row of each duplicate group so the constraint can be added.
    op.execute(
        """
        DELETE FROM notifications n
        USING notifications keep
        WHERE n.task_id = keep.task_id
          AND n.emp_id = keep.emp_id
          AND n.type = keep.type
          AND n.title = keep.title
          AND n.id > keep.id
        """
    )
    op.create_unique_constraint(
        CONSTRAINT_NAME,
        "notifications",
        ["task_id", "emp_id", "type", "title"],
    )


def downgrade() -> None:
    op.drop_constraint(CONSTRAINT_NAME, "notifications", type_="unique")

"""create module_versions, task_queues and tasks

Revision ID: 3f2a9c41d7e0
Revises:
Create Date: 2026-10-19 09:12:04.118502

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c41d7e0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "module_versions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("module", sa.String(), nullable=False),
        sa.Column("version", sa.String(), nullable=False),
        sa.Column("deployed_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("module", "version", name="uq_module_version"),
    )
    op.create_index("ix_module_versions_id", "module_versions", ["id"])
    op.create_index("ix_module_versions_module", "module_versions", ["module"])

    op.create_table(
        "task_queues",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False, server_default="5.0"),
    )
    op.create_index("ix_task_queues_id", "task_queues", ["id"])
    op.create_index("ix_task_queues_name", "task_queues", ["name"], unique=True)

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("task_name", sa.String(), nullable=True),
        sa.Column("queue_name", sa.String(), nullable=False),
        sa.Column("payload", sa.String(), nullable=True),
        sa.Column("eta", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("leased_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_tasks_id", "tasks", ["id"])
    op.create_index("ix_tasks_task_name", "tasks", ["task_name"], unique=True)
    op.create_index("ix_tasks_queue_name", "tasks", ["queue_name"])
    op.create_index("ix_tasks_eta", "tasks", ["eta"])
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_finished_at", "tasks", ["finished_at"])


def downgrade():
    op.drop_table("tasks")
    op.drop_table("task_queues")
    op.drop_table("module_versions")

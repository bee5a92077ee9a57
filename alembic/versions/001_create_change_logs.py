"""Create change_logs table.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def upgrade() -> None:
    op.create_table(
        "change_logs",
        sa.Column("subject_type", sa.String(255), nullable=False),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("field_name", sa.String(255), comment="Set only for per-field entries"),
        sa.Column("old_value", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("new_value", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("actor_id", sa.String(100), comment="Acting user ID"),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("method", sa.String(10)),
        sa.Column("endpoint", sa.String(2048)),
        sa.Column("description", sa.Text()),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("occurred_date", sa.Date()),
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_change_logs"),
    )

    # Single-column lookups
    op.create_index("ix_change_logs_subject_type", "change_logs", ["subject_type"])
    op.create_index("ix_change_logs_subject_id", "change_logs", ["subject_id"])
    op.create_index("ix_change_logs_action", "change_logs", ["action"])
    op.create_index("ix_change_logs_actor_id", "change_logs", ["actor_id"])
    op.create_index("ix_change_logs_occurred_date", "change_logs", ["occurred_date"])

    # Composite indexes for subject history, actor timelines and retention sweeps
    op.create_index("ix_change_logs_subject", "change_logs", ["subject_type", "subject_id"])
    op.create_index("ix_change_logs_subject_type_action", "change_logs", ["subject_type", "action"])
    op.create_index("ix_change_logs_actor_created", "change_logs", ["actor_id", "created_at"])
    op.create_index("ix_change_logs_occurred_action", "change_logs", ["occurred_date", "action"])


def downgrade() -> None:
    op.drop_table("change_logs")

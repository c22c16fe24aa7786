"""Create client storage table for portal sessions

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "client_storage",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.String(length=64), nullable=False),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("client_id", "key", name="uq_client_storage_client_key"),
    )

    # Every lookup is scoped to one client
    op.create_index("ix_client_storage_client_id", "client_storage", ["client_id"])


def downgrade() -> None:
    op.drop_index("ix_client_storage_client_id", table_name="client_storage")
    op.drop_table("client_storage")

"""Create webhook_logs and notifications tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = inspector.get_table_names()

    # Idempotency ledger: the unique fingerprint is the atomic first-sight check
    if "webhook_logs" not in existing_tables:
        op.create_table(
            "webhook_logs",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("fingerprint", sa.String(255), nullable=False, unique=True),
            sa.Column("order_id", sa.String(100), nullable=False, index=True),
            sa.Column("status", sa.String(50), nullable=False),
            sa.Column("amount", sa.String(50), nullable=True),
            sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )

    if "notifications" not in existing_tables:
        op.create_table(
            "notifications",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("type", sa.String(50), nullable=False),
            sa.Column("order_id", sa.String(100), nullable=False, index=True),
            sa.Column("user_id", sa.String(36), nullable=True, index=True),
            sa.Column("admin_user_ids", sa.JSON, nullable=False),
            sa.Column("is_collective_admin_notification", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("message", sa.Text, nullable=False),
            sa.Column("data", sa.JSON, nullable=False),
            sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint(
                "order_id",
                "type",
                "is_collective_admin_notification",
                name="uq_notifications_order_type_audience",
            ),
        )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("webhook_logs")

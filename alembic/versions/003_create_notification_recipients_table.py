"""Create notification_recipients table and backfill it from admin_user_ids

Revision ID: 003
Revises: 002
Create Date: 2026-10-20
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '003'
down_revision: Union[str, None] = '002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if table exists."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if table_exists('notification_recipients'):
        return

    recipients = op.create_table(
        'notification_recipients',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'notification_id',
            sa.String(36),
            sa.ForeignKey('notifications.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('admin_user_id', sa.String(36), nullable=False, index=True),
        sa.UniqueConstraint(
            'notification_id',
            'admin_user_id',
            name='uq_notification_recipients_notification_admin',
        ),
    )

    # Backfill from the recipient lists already frozen on collective rows
    notifications = sa.table(
        'notifications',
        sa.column('id', sa.String),
        sa.column('admin_user_ids', sa.JSON),
        sa.column('is_collective_admin_notification', sa.Boolean),
    )
    bind = op.get_bind()
    rows = bind.execute(
        sa.select(notifications.c.id, notifications.c.admin_user_ids).where(
            notifications.c.is_collective_admin_notification.is_(True)
        )
    ).fetchall()

    values = [
        {'notification_id': row.id, 'admin_user_id': admin_id}
        for row in rows
        for admin_id in dict.fromkeys(row.admin_user_ids or [])
    ]
    if values:
        op.bulk_insert(recipients, values)


def downgrade() -> None:
    if table_exists('notification_recipients'):
        op.drop_table('notification_recipients')

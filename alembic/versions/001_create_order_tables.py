"""Create users, orders and payment_sessions tables

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if table exists."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
            sa.Column('name', sa.String(200), nullable=True),
            sa.Column('role', sa.String(20), nullable=False, server_default='user', index=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )

    if not table_exists('orders'):
        op.create_table(
            'orders',
            sa.Column('id', sa.String(100), primary_key=True),
            sa.Column('user_id', sa.String(36), nullable=True, index=True),
            sa.Column('customer_email', sa.String(255), nullable=True),
            sa.Column('game', sa.String(200), nullable=True),
            sa.Column('service', sa.Text, nullable=True),
            sa.Column('price', sa.Numeric(12, 2), nullable=False),
            sa.Column('currency', sa.String(10), nullable=False, server_default='USD'),
            sa.Column('status', sa.String(20), nullable=False, server_default='pending', index=True),
            sa.Column('payment_id', sa.String(100), nullable=True),
            sa.Column('notes', sa.Text, nullable=True),
            sa.Column('date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )

    if not table_exists('payment_sessions'):
        op.create_table(
            'payment_sessions',
            sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
            sa.Column('order_id', sa.String(100), nullable=False, unique=True, index=True),
            sa.Column('user_id', sa.String(36), nullable=True),
            sa.Column('customer_email', sa.String(255), nullable=True),
            sa.Column('game', sa.String(200), nullable=True),
            sa.Column('service', sa.Text, nullable=True),
            sa.Column('amount', sa.Numeric(12, 2), nullable=False),
            sa.Column('currency', sa.String(10), nullable=False, server_default='USD'),
            sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )


def downgrade() -> None:
    if table_exists('payment_sessions'):
        op.drop_table('payment_sessions')
    if table_exists('orders'):
        op.drop_table('orders')
    if table_exists('users'):
        op.drop_table('users')

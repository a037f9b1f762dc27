"""Notification database model."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
import uuid

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orderhook.core.database import Base
from orderhook.models.order import utcnow


class NotificationType(str, Enum):
    """Notification types emitted by the payment pipeline."""

    payment_confirmed = "payment-confirmed"
    payment_failed = "payment-failed"


class Notification(Base):
    """A stored notification.

    Two shapes share this table:
    - individual: ``user_id`` set, ``is_collective_admin_notification`` false
    - collective: ``user_id`` null, ``is_collective_admin_notification`` true,
      recipients frozen in ``admin_user_ids`` at creation time

    The unique constraint allows at most one row of each shape per
    ``(order_id, type)``.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "order_id",
            "type",
            "is_collective_admin_notification",
            name="uq_notifications_order_type_audience",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    order_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    # Recipients
    user_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    admin_user_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_collective_admin_notification: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        audience = "admins" if self.is_collective_admin_notification else self.user_id
        return f"<Notification {self.type} {self.order_id} -> {audience}>"


class NotificationRecipient(Base):
    """Administrator membership of a collective notification.

    Mirrors ``Notification.admin_user_ids`` one row per admin so inbox
    queries go through an index instead of the JSON column. Written in the
    same transaction as the notification it belongs to.
    """

    __tablename__ = "notification_recipients"
    __table_args__ = (
        UniqueConstraint(
            "notification_id",
            "admin_user_id",
            name="uq_notification_recipients_notification_admin",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notification_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    admin_user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)

    def __repr__(self) -> str:
        return f"<NotificationRecipient {self.notification_id} -> {self.admin_user_id}>"

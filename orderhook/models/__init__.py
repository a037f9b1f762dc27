"""Database models."""

from orderhook.models.notification import Notification, NotificationRecipient, NotificationType
from orderhook.models.order import Order, OrderStatus, PaymentSession, PaymentSessionStatus
from orderhook.models.user import User
from orderhook.models.webhook_log import IdempotencyRecord

__all__ = [
    "IdempotencyRecord",
    "Notification",
    "NotificationRecipient",
    "NotificationType",
    "Order",
    "OrderStatus",
    "PaymentSession",
    "PaymentSessionStatus",
    "User",
]

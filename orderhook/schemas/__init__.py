"""Pydantic schemas for API requests and responses."""

from orderhook.schemas.notification import (
    MarkReadResponse,
    NotificationResponse,
    RepairResult,
    RepairSummary,
)
from orderhook.schemas.order import OrderResponse, OrderStatusUpdate
from orderhook.schemas.webhook import AckResult, AdditionalData, WebhookAck, WebhookEvent

__all__ = [
    "AckResult",
    "AdditionalData",
    "MarkReadResponse",
    "NotificationResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "RepairResult",
    "RepairSummary",
    "WebhookAck",
    "WebhookEvent",
]

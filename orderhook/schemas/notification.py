"""Notification schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Stored notification as returned to API clients."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    order_id: str
    user_id: Optional[str] = None
    admin_user_ids: list[str] = []
    is_collective_admin_notification: bool
    title: str
    message: str
    data: dict[str, Any] = {}
    read: bool
    created_at: datetime


class RepairResult(BaseModel):
    """Outcome of the notification repair path for one order."""

    order_id: str
    customer_created: bool = False
    admin_created: bool = False
    skipped_reason: Optional[str] = None


class RepairSummary(BaseModel):
    """Outcome of a repair sweep over recent orders."""

    orders_checked: int
    notifications_created: int
    results: list[RepairResult] = []


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int

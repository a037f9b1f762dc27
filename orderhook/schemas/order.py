"""Order schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from orderhook.models.order import OrderStatus


class OrderResponse(BaseModel):
    """Order response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    customer_email: Optional[str] = None
    game: Optional[str] = None
    service: Optional[str] = None
    price: Decimal
    currency: str
    status: str
    payment_id: Optional[str] = None
    date: datetime
    updated_at: datetime


class OrderStatusUpdate(BaseModel):
    """Operator request to advance an order."""

    status: OrderStatus = Field(..., description="Target status (e.g. processing, completed)")

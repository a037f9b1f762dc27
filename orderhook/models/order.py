"""Order and payment session database models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from orderhook.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    """Order lifecycle status.

    An order that has no row yet is in the implicit ``none`` state.
    """

    pending = "pending"
    paid = "paid"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class PaymentSessionStatus(str, Enum):
    """Checkout payment session status."""

    pending = "pending"
    completed = "completed"
    failed = "failed"


class Order(Base):
    """Order placed through the storefront or synthesized by the payment webhook.

    ``id`` matches the provider ``order_id`` for provider-originated orders.
    A null ``user_id`` marks a guest (unclaimed) order.
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Product details
    game: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    service: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Payment details
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=OrderStatus.pending.value, index=True, nullable=False
    )
    payment_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Order {self.id} - {self.status}>"


class PaymentSession(Base):
    """Checkout-time record of what the customer is paying for.

    Created by the storefront when the provider invoice is issued; the webhook
    reads it to synthesize the order on first confirmed payment.
    """

    __tablename__ = "payment_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    game: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    service: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PaymentSessionStatus.pending.value, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PaymentSession {self.order_id} - {self.status}>"

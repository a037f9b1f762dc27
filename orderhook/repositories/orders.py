"""SQLAlchemy order and payment session repositories."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderhook.models.order import (
    Order,
    OrderStatus,
    PaymentSession,
    PaymentSessionStatus,
    utcnow,
)


class SqlOrderRepository:
    """Order persistence over an async session. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_order_id(self, order_id: str) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    async def create(self, order: Order) -> Order:
        self.db.add(order)
        await self.db.flush()
        return order

    async def update_status(
        self,
        order: Order,
        status: OrderStatus,
        payment_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Order:
        order.status = status.value
        order.updated_at = utcnow()
        if payment_id:
            order.payment_id = payment_id
        if note:
            order.notes = f"{order.notes} | {note}" if order.notes else note
        await self.db.flush()
        return order

    async def list_since(self, since: datetime, statuses: list[OrderStatus]) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.updated_at >= since)
            .where(Order.status.in_([s.value for s in statuses]))
            .order_by(Order.updated_at.desc())
        )
        return list(result.scalars().all())


class SqlPaymentSessionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_order_id(self, order_id: str) -> Optional[PaymentSession]:
        result = await self.db.execute(
            select(PaymentSession).where(PaymentSession.order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def update_status(
        self, session: PaymentSession, status: PaymentSessionStatus
    ) -> PaymentSession:
        session.status = status.value
        session.updated_at = utcnow()
        await self.db.flush()
        return session

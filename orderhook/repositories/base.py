"""Collaborator interfaces consumed by the webhook pipeline.

Services depend on these protocols rather than on a shared database client,
so tests can substitute in-memory implementations.
"""

from datetime import datetime
from typing import Any, AsyncContextManager, Optional, Protocol

from orderhook.models.notification import Notification
from orderhook.models.order import Order, OrderStatus, PaymentSession, PaymentSessionStatus


class OrderRepository(Protocol):
    async def find_by_order_id(self, order_id: str) -> Optional[Order]: ...

    async def create(self, order: Order) -> Order: ...

    async def update_status(
        self,
        order: Order,
        status: OrderStatus,
        payment_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Order: ...

    async def list_since(self, since: datetime, statuses: list[OrderStatus]) -> list[Order]: ...


class PaymentSessionRepository(Protocol):
    async def find_by_order_id(self, order_id: str) -> Optional[PaymentSession]: ...

    async def update_status(
        self, session: PaymentSession, status: PaymentSessionStatus
    ) -> PaymentSession: ...


class NotificationRepository(Protocol):
    async def create_customer_notification(
        self,
        type: str,
        user_id: str,
        order_id: str,
        title: str,
        message: str,
        data: dict[str, Any],
    ) -> Notification: ...

    async def create_collective_admin_notification(
        self,
        type: str,
        admin_user_ids: list[str],
        order_id: str,
        title: str,
        message: str,
        data: dict[str, Any],
    ) -> Notification: ...

    async def exists(self, order_id: str, type: str, collective: bool) -> bool: ...

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]: ...

    async def list_for_admin(self, admin_id: str, limit: int = 50) -> list[Notification]: ...

    async def mark_read(self, notification_id: str) -> bool: ...

    async def mark_all_read_for_admin(self, admin_id: str) -> int: ...


class UserRepository(Protocol):
    """Administrator roster and user existence checks."""

    async def list_admin_user_ids(self) -> list[str]: ...

    async def user_exists(self, user_id: str) -> bool: ...


class Ledger(Protocol):
    async def record(
        self, fingerprint: str, order_id: str, status: str, amount: Optional[str]
    ) -> Any: ...


class UnitOfWork(Protocol):
    """One transaction scope over orders, payment sessions and notifications."""

    orders: OrderRepository
    payment_sessions: PaymentSessionRepository
    notifications: NotificationRepository
    users: UserRepository

    async def __aenter__(self) -> "UnitOfWork": ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    def savepoint(self) -> AsyncContextManager[Any]: ...

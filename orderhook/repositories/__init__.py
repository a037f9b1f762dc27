"""Repository interfaces and SQLAlchemy implementations."""

from orderhook.repositories.base import (
    Ledger,
    NotificationRepository,
    OrderRepository,
    PaymentSessionRepository,
    UnitOfWork,
    UserRepository,
)
from orderhook.repositories.notifications import SqlNotificationRepository
from orderhook.repositories.orders import SqlOrderRepository, SqlPaymentSessionRepository
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from orderhook.repositories.users import SqlUserRepository

__all__ = [
    "Ledger",
    "NotificationRepository",
    "OrderRepository",
    "PaymentSessionRepository",
    "SqlNotificationRepository",
    "SqlOrderRepository",
    "SqlPaymentSessionRepository",
    "SqlUnitOfWork",
    "SqlUserRepository",
    "UnitOfWork",
    "UserRepository",
]

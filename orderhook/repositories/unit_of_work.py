"""SQLAlchemy unit of work."""

from typing import Any, AsyncContextManager, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderhook.repositories.notifications import SqlNotificationRepository
from orderhook.repositories.orders import SqlOrderRepository, SqlPaymentSessionRepository
from orderhook.repositories.users import SqlUserRepository


class SqlUnitOfWork:
    """Opens one session and exposes the repositories bound to it.

    Nothing is committed unless ``commit()`` is called; leaving the block
    without committing rolls the transaction back.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SqlUnitOfWork":
        self.session = self.session_factory()
        self.orders = SqlOrderRepository(self.session)
        self.payment_sessions = SqlPaymentSessionRepository(self.session)
        self.notifications = SqlNotificationRepository(self.session)
        self.users = SqlUserRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    def savepoint(self) -> AsyncContextManager[Any]:
        """Nested transaction; an error inside rolls back only this block."""
        return self.session.begin_nested()

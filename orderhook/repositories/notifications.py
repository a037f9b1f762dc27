"""SQLAlchemy notification repository."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orderhook.models.notification import Notification, NotificationRecipient


class SqlNotificationRepository:
    """Notification persistence over an async session. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_customer_notification(
        self,
        type: str,
        user_id: str,
        order_id: str,
        title: str,
        message: str,
        data: dict[str, Any],
    ) -> Notification:
        notification = Notification(
            type=type,
            order_id=order_id,
            user_id=user_id,
            admin_user_ids=[],
            is_collective_admin_notification=False,
            title=title,
            message=message,
            data=data,
            read=False,
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def create_collective_admin_notification(
        self,
        type: str,
        admin_user_ids: list[str],
        order_id: str,
        title: str,
        message: str,
        data: dict[str, Any],
    ) -> Notification:
        notification = Notification(
            type=type,
            order_id=order_id,
            user_id=None,
            admin_user_ids=list(admin_user_ids),
            is_collective_admin_notification=True,
            title=title,
            message=message,
            data=data,
            read=False,
        )
        self.db.add(notification)
        await self.db.flush()
        self.db.add_all(
            NotificationRecipient(notification_id=notification.id, admin_user_id=admin_id)
            for admin_id in dict.fromkeys(admin_user_ids)
        )
        await self.db.flush()
        return notification

    async def exists(self, order_id: str, type: str, collective: bool) -> bool:
        result = await self.db.execute(
            select(Notification.id)
            .where(Notification.order_id == order_id)
            .where(Notification.type == type)
            .where(Notification.is_collective_admin_notification == collective)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_collective_admin_notification.is_(False))
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_admin(self, admin_id: str, limit: int = 50) -> list[Notification]:
        result = await self.db.execute(
            select(Notification)
            .join(NotificationRecipient, NotificationRecipient.notification_id == Notification.id)
            .where(NotificationRecipient.admin_user_id == admin_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_read(self, notification_id: str) -> bool:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .values(read=True)
        )
        return result.rowcount > 0

    async def mark_all_read_for_admin(self, admin_id: str) -> int:
        addressed = select(NotificationRecipient.notification_id).where(
            NotificationRecipient.admin_user_id == admin_id
        )
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id.in_(addressed))
            .where(Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

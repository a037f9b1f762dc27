"""SQLAlchemy user repository (administrator roster)."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderhook.core.config import settings
from orderhook.models.user import User


class SqlUserRepository:
    def __init__(self, db: AsyncSession, admin_roles: Optional[list[str]] = None):
        self.db = db
        self.admin_roles = admin_roles or settings.admin_role_names

    async def list_admin_user_ids(self) -> list[str]:
        """Current administrator ids, resolved at call time."""
        result = await self.db.execute(
            select(User.id)
            .where(func.lower(User.role).in_(self.admin_roles))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def user_exists(self, user_id: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

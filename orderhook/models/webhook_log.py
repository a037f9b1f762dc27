"""Idempotency ledger database model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from orderhook.core.database import Base
from orderhook.models.order import utcnow


class IdempotencyRecord(Base):
    """One row per externally delivered webhook event.

    The unique ``fingerprint`` is what makes the ledger insert atomic: a second
    insert with the same key fails inside the database. Rows are never updated.
    """

    __tablename__ = "webhook_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fingerprint: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    order_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<IdempotencyRecord {self.fingerprint}>"

"""Idempotency ledger for inbound webhook events."""

from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderhook.core.logging import get_logger
from orderhook.models.webhook_log import IdempotencyRecord
from orderhook.schemas.webhook import WebhookEvent

logger = get_logger(__name__)


class LedgerOutcome(str, Enum):
    inserted = "inserted"
    already_exists = "already_exists"


def fingerprint_for(event: WebhookEvent) -> str:
    """Idempotency key for one real-world provider event.

    The provider ``uuid`` identifies the event when present; otherwise the
    order, status and amount together stand in for it.
    """
    if event.uuid:
        return event.uuid
    return f"{event.order_id}_{event.status}_{event.effective_amount}"


class IdempotencyLedger:
    """Ledger backed by the ``webhook_logs`` unique constraint.

    Each insert runs in its own short transaction so the record is durable
    before any order or notification work starts. Concurrent inserts of the
    same fingerprint are serialized by the database: exactly one commits and
    the rest fail with an integrity error.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        fingerprint: str,
        order_id: str,
        status: str,
        amount: Optional[str],
    ) -> LedgerOutcome:
        async with self.session_factory() as db:
            db.add(
                IdempotencyRecord(
                    fingerprint=fingerprint,
                    order_id=order_id,
                    status=status,
                    amount=amount,
                )
            )
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info("ledger_fingerprint_exists", fingerprint=fingerprint, order_id=order_id)
                return LedgerOutcome.already_exists

        logger.info("ledger_fingerprint_recorded", fingerprint=fingerprint, order_id=order_id)
        return LedgerOutcome.inserted

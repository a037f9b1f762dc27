import asyncio

from sqlalchemy import func, select

from orderhook.models import IdempotencyRecord
from orderhook.schemas.webhook import WebhookEvent
from orderhook.services.ledger import IdempotencyLedger, LedgerOutcome, fingerprint_for
from tests.fakes import InMemoryLedger


def test_fingerprint_prefers_provider_uuid():
    event = WebhookEvent(uuid="u1", order_id="o1", status="paid", amount="10.00")
    assert fingerprint_for(event) == "u1"


def test_fingerprint_falls_back_to_order_status_amount():
    event = WebhookEvent(order_id="o1", status="paid", payment_amount="10.00")
    assert fingerprint_for(event) == "o1_paid_10.00"


async def test_first_record_inserts_then_reports_existing(session_factory):
    ledger = IdempotencyLedger(session_factory)

    first = await ledger.record("u1", "o1", "paid", "10.00")
    second = await ledger.record("u1", "o1", "paid", "10.00")

    assert first is LedgerOutcome.inserted
    assert second is LedgerOutcome.already_exists

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(IdempotencyRecord))
    assert count == 1


async def test_distinct_fingerprints_for_same_order_both_insert(session_factory):
    ledger = IdempotencyLedger(session_factory)

    assert await ledger.record("u1", "o1", "paid", "10.00") is LedgerOutcome.inserted
    assert await ledger.record("u2", "o1", "check", "10.00") is LedgerOutcome.inserted


async def test_concurrent_records_exactly_one_wins(session_factory):
    """
    Test: concurrent deliveries of one event. Exactly one caller inserts.
    """
    ledger = IdempotencyLedger(session_factory)

    results = await asyncio.gather(
        *[ledger.record("u-race", "o1", "paid", "10.00") for _ in range(8)]
    )

    inserted = [r for r in results if r is LedgerOutcome.inserted]
    existing = [r for r in results if r is LedgerOutcome.already_exists]
    assert len(inserted) == 1, f"Expected 1 insert, got {len(inserted)}. Results: {results}"
    assert len(existing) == 7


async def test_in_memory_ledger_first_wins_under_interleaving():
    ledger = InMemoryLedger()

    results = await asyncio.gather(
        *[ledger.record("u1", "o1", "paid", "10.00") for _ in range(20)]
    )

    assert results.count(LedgerOutcome.inserted) == 1
    assert results.count(LedgerOutcome.already_exists) == 19

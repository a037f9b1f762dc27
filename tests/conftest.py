import os

# Settings are read at import time; configure before importing orderhook.
os.environ["APP_ENV"] = "test"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./orderhook_test_unused.db"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["TEST_MODE"] = "false"
os.environ["API_KEYS"] = "test-api-key"
os.environ["ADMIN_ROLES"] = "admin,owner"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_ALERTS_CHAT_ID"] = ""

from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from orderhook.core.database import Base
from orderhook.models import Order, PaymentSession, User
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from orderhook.services.ledger import IdempotencyLedger
from orderhook.services.signature import SignatureVerifier
from orderhook.services.webhook_service import WebhookService
from tests.fakes import WEBHOOK_SECRET, RecordingAlerts


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite engine with working SAVEPOINT support."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orderhook.db'}",
        echo=False,
    )

    # The driver's implicit transactions break SAVEPOINT; emit BEGIN ourselves.
    # IMMEDIATE takes the write lock up front so concurrent writers queue on the
    # busy timeout instead of failing with "database is locked".
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Factory to create multiple sessions for concurrent tests."""
    return async_sessionmaker(
        bind=db_engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


@pytest.fixture
def alerts():
    return RecordingAlerts()


@pytest.fixture
def webhook_service(session_factory, alerts):
    return WebhookService(
        ledger=IdempotencyLedger(session_factory),
        uow_factory=lambda: SqlUnitOfWork(session_factory),
        verifier=SignatureVerifier(WEBHOOK_SECRET),
        alerts=alerts,
    )


@pytest.fixture
async def seeded_users(session_factory):
    """One customer (c1) and three administrators across both admin roles."""
    async with session_factory() as session:
        session.add_all(
            [
                User(id="c1", email="c1@example.com", name="Customer", role="user"),
                User(id="a1", email="a1@example.com", name="Admin 1", role="admin"),
                User(id="a2", email="a2@example.com", name="Admin 2", role="ADMIN"),
                User(id="a3", email="a3@example.com", name="Owner", role="owner"),
            ]
        )
        await session.commit()
    return {"customer": "c1", "admins": ["a1", "a2", "a3"]}


@pytest.fixture
def add_order(session_factory):
    async def _add(order_id="o1", status="pending", user_id="c1", price="10.00"):
        async with session_factory() as session:
            session.add(
                Order(
                    id=order_id,
                    user_id=user_id,
                    customer_email="c1@example.com",
                    game="G",
                    service="S",
                    price=Decimal(price),
                    currency="USD",
                    status=status,
                )
            )
            await session.commit()

    return _add


@pytest.fixture
def add_payment_session(session_factory):
    async def _add(order_id="o1", amount="25.00", user_id="c1"):
        async with session_factory() as session:
            session.add(
                PaymentSession(
                    order_id=order_id,
                    user_id=user_id,
                    customer_email="checkout@example.com",
                    game="Checkout Game",
                    service="Checkout Service",
                    amount=Decimal(amount),
                    currency="EUR",
                )
            )
            await session.commit()

    return _add

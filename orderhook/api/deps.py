"""Dependency injection for API endpoints."""

from orderhook.core.database import async_session_maker
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from orderhook.services.alert_service import AlertService
from orderhook.services.ledger import IdempotencyLedger
from orderhook.services.signature import SignatureVerifier
from orderhook.services.webhook_service import WebhookService


def get_unit_of_work() -> SqlUnitOfWork:
    """Dependency for a fresh unit of work (entered by the caller)."""
    return SqlUnitOfWork(async_session_maker)


def get_webhook_service() -> WebhookService:
    """Dependency for the webhook orchestrator."""
    return WebhookService(
        ledger=IdempotencyLedger(async_session_maker),
        uow_factory=lambda: SqlUnitOfWork(async_session_maker),
        verifier=SignatureVerifier(),
        alerts=AlertService(),
    )

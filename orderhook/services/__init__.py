"""Business logic services."""

from orderhook.services.alert_service import AlertService
from orderhook.services.ledger import IdempotencyLedger, LedgerOutcome, fingerprint_for
from orderhook.services.notification_service import NotificationFanout, NotificationRepairService
from orderhook.services.order_service import OrderService
from orderhook.services.signature import SignatureVerifier, compute_signature
from orderhook.services.webhook_service import WebhookService

__all__ = [
    "AlertService",
    "IdempotencyLedger",
    "LedgerOutcome",
    "NotificationFanout",
    "NotificationRepairService",
    "OrderService",
    "SignatureVerifier",
    "WebhookService",
    "compute_signature",
    "fingerprint_for",
]

"""Webhook processing error taxonomy.

Each error carries the HTTP status the provider should see if it escapes
before the event is ledgered. Errors raised after ledgering are absorbed by
the orchestrator and never change the acknowledgment status.
"""


class WebhookError(Exception):
    """Base error for webhook and order processing."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class SignatureInvalid(WebhookError):
    """Signature header missing or not matching the computed digest."""

    status_code = 401

    def __init__(self, message: str = "Invalid signature", expected: str | None = None):
        super().__init__(message)
        self.expected = expected


class MalformedPayload(WebhookError):
    """Required fields missing or unparseable; not ledgered so a corrected resend succeeds."""

    status_code = 400


class DuplicateEvent(WebhookError):
    """Fingerprint already present in the ledger."""

    status_code = 200

    def __init__(self, fingerprint: str):
        super().__init__(f"Webhook already processed: {fingerprint}")
        self.fingerprint = fingerprint


class OrderLookupFailure(WebhookError):
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class TransitionConflict(WebhookError):
    """Requested status change is not allowed from the order's current status."""

    status_code = 409

    def __init__(self, order_id: str, current: str, target: str):
        super().__init__(f"Order {order_id} cannot move from {current} to {target}")
        self.order_id = order_id
        self.current = current
        self.target = target


class NotificationPersistFailure(WebhookError):
    status_code = 500

    def __init__(self, order_id: str, error: str):
        super().__init__(f"Failed to store notifications for order {order_id}: {error}")
        self.order_id = order_id
        self.error = error

"""Webhook orchestrator - end-to-end handling of one provider callback."""

import json
from typing import Callable, Optional

from pydantic import ValidationError

from orderhook.core.exceptions import (
    DuplicateEvent,
    MalformedPayload,
    NotificationPersistFailure,
    OrderLookupFailure,
    SignatureInvalid,
    TransitionConflict,
)
from orderhook.core.logging import get_logger
from orderhook.repositories.base import Ledger, UnitOfWork
from orderhook.schemas.webhook import AckResult, WebhookAck, WebhookEvent
from orderhook.services.alert_service import AlertService
from orderhook.services.ledger import LedgerOutcome, fingerprint_for
from orderhook.services.notification_service import NotificationFanout
from orderhook.services.order_service import OrderService
from orderhook.services.signature import SignatureVerifier

logger = get_logger(__name__)


def parse_event(raw_body: bytes) -> WebhookEvent:
    """Parse a verified body into a WebhookEvent.

    Raises:
        MalformedPayload: body is not a JSON object or lacks required fields.
    """
    try:
        payload = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayload(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayload("Webhook body must be a JSON object")

    try:
        return WebhookEvent.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in e.errors())
        raise MalformedPayload(f"Invalid webhook payload: {fields}") from e


def _ack(
    status: str,
    message: str,
    order_id: Optional[str] = None,
    status_code: int = 200,
) -> AckResult:
    return AckResult(
        status_code=status_code,
        body=WebhookAck(
            received=status_code < 300,
            status=status,
            message=message,
            order_id=order_id,
        ),
    )


class WebhookService:
    """Verifies, deduplicates and applies payment provider callbacks.

    Status policy:
    - bad signature -> 401, nothing recorded
    - malformed payload -> 400, nothing recorded, so a corrected resend works
    - already ledgered -> 200, no side effects
    - anything that goes wrong after the ledger insert -> 200 plus logging and
      an operator alert; a non-2xx here would only trigger useless redelivery
    - storage failure before the ledger insert -> exception (5xx), the
      provider retries and idempotency absorbs it
    """

    def __init__(
        self,
        ledger: Ledger,
        uow_factory: Callable[[], UnitOfWork],
        verifier: Optional[SignatureVerifier] = None,
        alerts: Optional[AlertService] = None,
    ):
        self.ledger = ledger
        self.uow_factory = uow_factory
        self.verifier = verifier or SignatureVerifier()
        self.alerts = alerts or AlertService()

    async def handle_webhook(
        self,
        raw_body: bytes,
        signature_header: Optional[str],
    ) -> AckResult:
        try:
            self._verify(raw_body, signature_header)
        except SignatureInvalid as e:
            return _ack("rejected", e.message, status_code=e.status_code)

        try:
            event = parse_event(raw_body)
        except MalformedPayload as e:
            logger.warning("webhook_payload_malformed", error=e.message)
            return _ack("rejected", e.message, status_code=e.status_code)

        logger.info(
            "webhook_received",
            order_id=event.order_id,
            uuid=event.uuid,
            status=event.status,
            is_final=event.is_final,
            amount=event.effective_amount,
        )

        fingerprint = fingerprint_for(event)
        try:
            await self._claim(event, fingerprint)
        except DuplicateEvent:
            logger.info("webhook_duplicate", fingerprint=fingerprint, order_id=event.order_id)
            return _ack("already_processed", "Webhook already processed", event.order_id)

        try:
            return await self._process(event)
        except (TransitionConflict, OrderLookupFailure) as e:
            logger.warning(
                "webhook_event_ignored",
                fingerprint=fingerprint,
                order_id=event.order_id,
                reason=e.message,
            )
            return _ack("ignored", e.message, event.order_id)
        except Exception as e:
            logger.error(
                "webhook_processing_failed",
                fingerprint=fingerprint,
                order_id=event.order_id,
                error=str(e),
                exc_info=True,
            )
            await self.alerts.alert_webhook_failure(
                order_id=event.order_id,
                fingerprint=fingerprint,
                error=str(e),
            )
            return _ack("accepted", "Webhook accepted", event.order_id)

    def _verify(self, raw_body: bytes, signature_header: Optional[str]) -> None:
        check = self.verifier.verify(raw_body, signature_header)
        if not check.valid:
            logger.warning(
                "webhook_signature_invalid",
                received=signature_header,
                expected=check.expected,
                body_length=len(raw_body),
            )
            raise SignatureInvalid(expected=check.expected)

    async def _claim(self, event: WebhookEvent, fingerprint: str) -> None:
        """Record first sight of the event.

        Raises:
            DuplicateEvent: the fingerprint is already in the ledger.
        """
        outcome = await self.ledger.record(
            fingerprint,
            event.order_id,
            event.status,
            event.effective_amount,
        )
        if outcome is LedgerOutcome.already_exists:
            raise DuplicateEvent(fingerprint)

    async def _process(self, event: WebhookEvent) -> AckResult:
        """Apply the order transition and fan out notifications in one scope.

        Notifications run in a savepoint: if they fail, only they are rolled
        back and the order transition still commits.
        """
        notification_error: Optional[NotificationPersistFailure] = None

        async with self.uow_factory() as uow:
            orders = OrderService(uow.orders, uow.payment_sessions)
            transition = await orders.apply_payment_event(event)

            if not transition.applied:
                await uow.commit()
                return _ack("recorded", f"Event {event.status} recorded", event.order_id)

            fanout = NotificationFanout(uow.notifications, uow.users)
            try:
                async with uow.savepoint():
                    await fanout.fan_out(transition)
            except NotificationPersistFailure as e:
                notification_error = e

            await uow.commit()

        if notification_error is not None:
            await self.alerts.alert_notification_failure(
                order_id=transition.order_id,
                error=notification_error.error,
            )

        logger.info(
            "webhook_processed",
            order_id=transition.order_id,
            outcome=transition.outcome,
            status=transition.target_status.value,
            notifications_stored=notification_error is None,
        )
        return _ack(
            "processed",
            f"Order {transition.outcome}: {transition.target_status.value}",
            transition.order_id,
        )

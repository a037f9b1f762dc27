"""Order state store - applies payment events to orders."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from orderhook.core.exceptions import OrderLookupFailure, TransitionConflict
from orderhook.core.logging import get_logger
from orderhook.models.order import Order, OrderStatus, PaymentSessionStatus, utcnow
from orderhook.repositories.base import OrderRepository, PaymentSessionRepository
from orderhook.schemas.webhook import WebhookEvent

logger = get_logger(__name__)


# Order lifecycle. An order with no row is in the implicit "none" state and
# can only be created as paid (see apply_payment_event).
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.paid, OrderStatus.failed}),
    OrderStatus.paid: frozenset({OrderStatus.processing, OrderStatus.failed}),
    OrderStatus.processing: frozenset({OrderStatus.completed, OrderStatus.failed}),
    OrderStatus.completed: frozenset(),
    OrderStatus.failed: frozenset(),
}

# Provider statuses that settle the payment, when flagged final.
PAID_PROVIDER_STATUSES = {"paid", "paid_over"}
FAILED_PROVIDER_STATUSES = {
    "fail",
    "cancel",
    "system_fail",
    "wrong_amount",
    "wrong_amount_waiting",
}

# Transitions the customer is told about.
CUSTOMER_VISIBLE_STATUSES = {OrderStatus.paid, OrderStatus.failed}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def target_status_for(event: WebhookEvent) -> Optional[OrderStatus]:
    """Order status a provider event asks for, or None for informational events."""
    if not event.is_final:
        return None
    status = event.status.lower()
    if status in PAID_PROVIDER_STATUSES:
        return OrderStatus.paid
    if status in FAILED_PROVIDER_STATUSES:
        return OrderStatus.failed
    return None


@dataclass
class TransitionResult:
    """What applying one event did to its order."""

    order_id: str
    outcome: str  # created | updated | informational | no_order
    order: Optional[Order] = None
    previous_status: Optional[OrderStatus] = None
    target_status: Optional[OrderStatus] = None
    customer_email: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.outcome in ("created", "updated")

    @property
    def customer_visible(self) -> bool:
        return self.applied and self.target_status in CUSTOMER_VISIBLE_STATUSES


class OrderService:
    """Locates, synthesizes and transitions orders.

    Callers must only reach this service after the idempotency ledger has
    confirmed first sight of the event; that is what keeps each transition
    applied at most once.
    """

    def __init__(
        self,
        orders: OrderRepository,
        payment_sessions: PaymentSessionRepository,
    ):
        self.orders = orders
        self.payment_sessions = payment_sessions

    async def apply_payment_event(self, event: WebhookEvent) -> TransitionResult:
        """Apply a verified, first-seen provider event.

        Raises:
            TransitionConflict: the order's current status does not allow the
                requested change (e.g. a paid event for a completed order).
        """
        target = target_status_for(event)
        if target is None:
            logger.info(
                "order_event_informational",
                order_id=event.order_id,
                status=event.status,
                is_final=event.is_final,
            )
            return TransitionResult(order_id=event.order_id, outcome="informational")

        order = await self.orders.find_by_order_id(event.order_id)

        if order is None:
            if target is OrderStatus.paid:
                return await self._create_paid_order(event)
            logger.warning(
                "order_failure_without_order",
                order_id=event.order_id,
                status=event.status,
            )
            await self._settle_payment_session(event.order_id, target)
            return TransitionResult(
                order_id=event.order_id, outcome="no_order", target_status=target
            )

        current = OrderStatus(order.status)
        if not can_transition(current, target):
            logger.warning(
                "order_transition_rejected",
                order_id=order.id,
                current=current.value,
                target=target.value,
                fingerprint=event.uuid,
            )
            raise TransitionConflict(order.id, current.value, target.value)

        now = utcnow().isoformat()
        if target is OrderStatus.paid:
            note = f"Payment confirmed via provider webhook at {now} - Payment ID: {event.uuid}"
        else:
            note = f"Payment {event.status} via provider webhook at {now}"

        await self.orders.update_status(
            order,
            target,
            payment_id=event.uuid if target is OrderStatus.paid else None,
            note=note,
        )
        await self._settle_payment_session(order.id, target)

        logger.info(
            "order_transition_applied",
            order_id=order.id,
            previous=current.value,
            status=target.value,
        )

        return TransitionResult(
            order_id=order.id,
            outcome="updated",
            order=order,
            previous_status=current,
            target_status=target,
            customer_email=order.customer_email or event.additional_data.customer_email,
        )

    async def advance(self, order_id: str, target: OrderStatus) -> Order:
        """Operator transition (e.g. paid -> processing -> completed)."""
        order = await self.orders.find_by_order_id(order_id)
        if order is None:
            raise OrderLookupFailure(order_id)

        current = OrderStatus(order.status)
        if not can_transition(current, target):
            raise TransitionConflict(order_id, current.value, target.value)

        await self.orders.update_status(order, target)
        logger.info(
            "order_transition_applied",
            order_id=order_id,
            previous=current.value,
            status=target.value,
        )
        return order

    async def _create_paid_order(self, event: WebhookEvent) -> TransitionResult:
        """Synthesize an order on first confirmed payment.

        Checkout data comes from the stored payment session when the
        storefront created one, otherwise from the event's additional_data.
        """
        extra = event.additional_data
        session = await self.payment_sessions.find_by_order_id(event.order_id)

        if session is not None:
            user_id = session.user_id or extra.user_id
            customer_email = session.customer_email or extra.customer_email
            game = session.game or extra.game
            service = session.service or extra.service
            price = Decimal(str(session.amount))
            currency = session.currency
        else:
            user_id = extra.user_id
            customer_email = extra.customer_email
            game = extra.game
            service = extra.service
            price = event.decimal_amount
            currency = event.currency or "USD"

        order = Order(
            id=event.order_id,
            user_id=user_id,
            customer_email=customer_email,
            game=game,
            service=service,
            price=price,
            currency=currency,
            status=OrderStatus.paid.value,
            payment_id=event.uuid,
            notes=f"Payment confirmed via provider webhook - Payment ID: {event.uuid}",
            date=utcnow(),
            updated_at=utcnow(),
        )
        await self.orders.create(order)

        if session is not None:
            await self.payment_sessions.update_status(session, PaymentSessionStatus.completed)

        logger.info(
            "order_created_from_webhook",
            order_id=order.id,
            user_id=user_id,
            price=str(price),
            from_payment_session=session is not None,
        )

        return TransitionResult(
            order_id=order.id,
            outcome="created",
            order=order,
            previous_status=None,
            target_status=OrderStatus.paid,
            customer_email=customer_email,
        )

    async def _settle_payment_session(self, order_id: str, target: OrderStatus) -> None:
        session = await self.payment_sessions.find_by_order_id(order_id)
        if session is None:
            return
        status = (
            PaymentSessionStatus.completed
            if target is OrderStatus.paid
            else PaymentSessionStatus.failed
        )
        await self.payment_sessions.update_status(session, status)

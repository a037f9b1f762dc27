"""Notification fan-out for order state changes.

One payment event produces at most two notification rows: an individual
row for the customer and a single collective row for the administrators.
The collective row stores the administrator ids resolved at fan-out time,
so its audience does not change when the roster does.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union

from sqlalchemy.exc import IntegrityError

from orderhook.core.config import settings
from orderhook.core.exceptions import NotificationPersistFailure, OrderLookupFailure
from orderhook.core.logging import get_logger
from orderhook.models.notification import Notification, NotificationType
from orderhook.models.order import Order, OrderStatus, utcnow
from orderhook.repositories.base import NotificationRepository, UnitOfWork, UserRepository
from orderhook.schemas.notification import RepairResult, RepairSummary
from orderhook.services.order_service import TransitionResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class Individual:
    """A single user recipient."""

    user_id: str


@dataclass(frozen=True)
class Collective:
    """The administrator set, frozen at creation time."""

    admin_user_ids: tuple[str, ...]


Recipient = Union[Individual, Collective]

# Which audiences hear about which order status.
NOTIFICATION_TYPE_FOR_STATUS = {
    OrderStatus.paid: NotificationType.payment_confirmed,
    OrderStatus.failed: NotificationType.payment_failed,
}
ADMIN_NOTIFIED_TYPES = {NotificationType.payment_confirmed}

# Order statuses at or past payment; used by the repair path.
PAID_OR_LATER = [OrderStatus.paid, OrderStatus.processing, OrderStatus.completed]


def build_title(type: NotificationType, order: Order, for_admin: bool) -> str:
    game = order.game or "Order"
    if type is NotificationType.payment_confirmed:
        return f"Payment confirmed - {game}" if for_admin else "Payment confirmed"
    if type is NotificationType.payment_failed:
        return "Payment failed"
    return "New notification"


def build_message(type: NotificationType, order: Order, for_admin: bool) -> str:
    customer = order.customer_email or "guest"
    if type is NotificationType.payment_confirmed:
        if for_admin:
            return (
                f"Payment for order {order.id} from {customer} confirmed"
                f" - {order.game or 'unknown game'} - {order.service or 'unknown service'}"
                f" - price: {order.price} {order.currency}"
            )
        return (
            f"Your payment for order {order.id} has been confirmed."
            " Work on your order will start shortly."
        )
    if type is NotificationType.payment_failed:
        return f"The payment for order {order.id} failed. Please try again."
    return f"Order {order.id} was updated."


def build_data(order: Order, customer_email: Optional[str] = None) -> dict[str, Any]:
    """JSON payload stored with the notification; always carries ``orderId``."""
    return {
        "orderId": order.id,
        "userId": order.user_id,
        "customerEmail": customer_email or order.customer_email,
        "game": order.game,
        "service": order.service,
        "price": str(order.price),
        "currency": order.currency,
        "status": order.status,
        "paymentId": order.payment_id,
        "paymentMethod": settings.payment_provider_name,
    }


@dataclass
class FanoutResult:
    customer: Optional[Notification] = None
    admin: Optional[Notification] = None

    @property
    def created(self) -> int:
        return int(self.customer is not None) + int(self.admin is not None)


class NotificationFanout:
    """Turns one order transition into the minimal set of notification rows."""

    def __init__(self, notifications: NotificationRepository, users: UserRepository):
        self.notifications = notifications
        self.users = users

    async def recipients_for(
        self, order: Order, type: NotificationType
    ) -> list[Recipient]:
        """Resolve who hears about ``type`` for ``order``.

        The administrator set always becomes one Collective recipient, even
        when empty; it is never expanded into per-admin recipients.
        """
        recipients: list[Recipient] = []

        if order.user_id:
            if await self.users.user_exists(order.user_id):
                recipients.append(Individual(order.user_id))
            else:
                logger.warning(
                    "notification_customer_unknown",
                    order_id=order.id,
                    user_id=order.user_id,
                )

        if type in ADMIN_NOTIFIED_TYPES:
            admin_ids = await self.users.list_admin_user_ids()
            recipients.append(Collective(tuple(admin_ids)))

        return recipients

    async def fan_out(self, transition: TransitionResult) -> FanoutResult:
        """Create notifications for an applied, customer-visible transition.

        Raises:
            NotificationPersistFailure: recipients could not be resolved or a
                row could not be stored. The caller decides what that
                means for the surrounding transaction.
        """
        result = FanoutResult()
        if not transition.customer_visible or transition.order is None:
            return result

        order = transition.order
        type = NOTIFICATION_TYPE_FOR_STATUS[transition.target_status]

        try:
            recipients = await self.recipients_for(order, type)
            data = build_data(order, transition.customer_email)
            for recipient in recipients:
                notification = await self.store(recipient, type, order, data)
                if isinstance(recipient, Individual):
                    result.customer = notification
                else:
                    result.admin = notification
        except Exception as e:
            logger.error(
                "notification_persist_failed",
                order_id=order.id,
                type=type.value,
                error=str(e),
            )
            raise NotificationPersistFailure(order.id, str(e)) from e

        logger.info(
            "notifications_fanned_out",
            order_id=order.id,
            type=type.value,
            customer=result.customer is not None,
            admin_recipients=len(result.admin.admin_user_ids) if result.admin else 0,
        )
        return result

    async def store(
        self,
        recipient: Recipient,
        type: NotificationType,
        order: Order,
        data: dict[str, Any],
    ) -> Notification:
        if isinstance(recipient, Individual):
            return await self.notifications.create_customer_notification(
                type=type.value,
                user_id=recipient.user_id,
                order_id=order.id,
                title=build_title(type, order, for_admin=False),
                message=build_message(type, order, for_admin=False),
                data=data,
            )
        return await self.notifications.create_collective_admin_notification(
            type=type.value,
            admin_user_ids=list(recipient.admin_user_ids),
            order_id=order.id,
            title=build_title(type, order, for_admin=True),
            message=build_message(type, order, for_admin=True),
            data=data,
        )


class NotificationRepairService:
    """Recreates payment notifications that were lost after an order committed.

    Safe to run any number of times: a row is only written when no row of the
    same shape exists for the order, and the table's unique constraint
    rejects a concurrent duplicate.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def repair_order(self, order_id: str) -> RepairResult:
        order = await self.uow.orders.find_by_order_id(order_id)
        if order is None:
            raise OrderLookupFailure(order_id)

        result = RepairResult(order_id=order_id)
        if OrderStatus(order.status) not in PAID_OR_LATER:
            result.skipped_reason = f"order status is {order.status}"
            return result

        type = NotificationType.payment_confirmed
        fanout = NotificationFanout(self.uow.notifications, self.uow.users)
        data = build_data(order)

        for recipient in await fanout.recipients_for(order, type):
            collective = isinstance(recipient, Collective)
            if await self.uow.notifications.exists(order.id, type.value, collective):
                continue
            try:
                async with self.uow.savepoint():
                    await fanout.store(recipient, type, order, data)
            except IntegrityError:
                logger.info(
                    "notification_repair_raced",
                    order_id=order.id,
                    collective=collective,
                )
                continue
            if collective:
                result.admin_created = True
            else:
                result.customer_created = True

        await self.uow.commit()

        if result.customer_created or result.admin_created:
            logger.info(
                "notification_repaired",
                order_id=order.id,
                customer=result.customer_created,
                admin=result.admin_created,
            )
        return result

    async def repair_recent(self, hours: Optional[int] = None) -> RepairSummary:
        window = hours if hours is not None else settings.notification_repair_window_hours
        since = utcnow() - timedelta(hours=window)
        orders = await self.uow.orders.list_since(since, PAID_OR_LATER)

        results = [await self.repair_order(order.id) for order in orders]
        created = sum(int(r.customer_created) + int(r.admin_created) for r in results)

        logger.info(
            "notification_repair_sweep",
            orders_checked=len(orders),
            notifications_created=created,
            window_hours=window,
        )
        return RepairSummary(
            orders_checked=len(orders),
            notifications_created=created,
            results=results,
        )

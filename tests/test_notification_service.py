import pytest

from orderhook.core.exceptions import NotificationPersistFailure, OrderLookupFailure
from orderhook.models import NotificationType, OrderStatus
from orderhook.services.notification_service import (
    Collective,
    Individual,
    NotificationFanout,
    NotificationRepairService,
)
from orderhook.services.order_service import TransitionResult
from tests.fakes import (
    InMemoryNotifications,
    InMemoryOrders,
    InMemoryUnitOfWork,
    InMemoryUsers,
    make_order,
)


def paid_transition(order) -> TransitionResult:
    return TransitionResult(
        order_id=order.id,
        outcome="updated",
        order=order,
        previous_status=OrderStatus.pending,
        target_status=OrderStatus.paid,
        customer_email=order.customer_email,
    )


@pytest.mark.parametrize("admin_count", [0, 1, 3, 25])
async def test_paid_fan_out_stores_one_collective_row_for_any_roster(admin_count):
    admins = [f"a{i}" for i in range(admin_count)]
    notifications = InMemoryNotifications()
    fanout = NotificationFanout(notifications, InMemoryUsers(customers={"c1"}, admins=admins))

    result = await fanout.fan_out(paid_transition(make_order()))

    assert len(notifications.rows) == 2
    assert result.created == 2
    collective = [n for n in notifications.rows if n.is_collective_admin_notification]
    assert len(collective) == 1
    assert collective[0].admin_user_ids == admins
    assert collective[0].user_id is None


async def test_customer_row_is_individual_and_carries_order_id():
    notifications = InMemoryNotifications()
    fanout = NotificationFanout(notifications, InMemoryUsers(customers={"c1"}, admins=["a1"]))

    result = await fanout.fan_out(paid_transition(make_order()))

    customer = result.customer
    assert customer.user_id == "c1"
    assert customer.type == NotificationType.payment_confirmed.value
    assert not customer.is_collective_admin_notification
    assert customer.order_id == "o1"
    assert customer.data["orderId"] == "o1"
    assert result.admin.data["orderId"] == "o1"


async def test_guest_order_notifies_admins_only():
    notifications = InMemoryNotifications()
    fanout = NotificationFanout(notifications, InMemoryUsers(admins=["a1", "a2"]))

    result = await fanout.fan_out(paid_transition(make_order(user_id=None)))

    assert result.customer is None
    assert result.admin.admin_user_ids == ["a1", "a2"]
    assert len(notifications.rows) == 1


async def test_unknown_customer_is_skipped():
    users = InMemoryUsers(customers=set(), admins=["a1"])
    recipients = await NotificationFanout(InMemoryNotifications(), users).recipients_for(
        make_order(user_id="ghost"), NotificationType.payment_confirmed
    )
    assert recipients == [Collective(("a1",))]


async def test_failed_payment_notifies_customer_only():
    notifications = InMemoryNotifications()
    fanout = NotificationFanout(notifications, InMemoryUsers(customers={"c1"}, admins=["a1"]))
    order = make_order(status=OrderStatus.failed)
    transition = TransitionResult(
        order_id="o1",
        outcome="updated",
        order=order,
        previous_status=OrderStatus.pending,
        target_status=OrderStatus.failed,
    )

    result = await fanout.fan_out(transition)

    assert result.admin is None
    assert result.customer.type == NotificationType.payment_failed.value
    assert len(notifications.rows) == 1


async def test_non_visible_transition_creates_nothing():
    notifications = InMemoryNotifications()
    fanout = NotificationFanout(notifications, InMemoryUsers(customers={"c1"}, admins=["a1"]))
    transition = TransitionResult(order_id="o1", outcome="informational")

    result = await fanout.fan_out(transition)

    assert result.created == 0
    assert notifications.rows == []


async def test_storage_error_becomes_persist_failure():
    notifications = InMemoryNotifications(fail_with=RuntimeError("disk full"))
    fanout = NotificationFanout(notifications, InMemoryUsers(customers={"c1"}, admins=["a1"]))

    with pytest.raises(NotificationPersistFailure) as exc_info:
        await fanout.fan_out(paid_transition(make_order()))

    assert exc_info.value.order_id == "o1"
    assert "disk full" in exc_info.value.error


async def test_recipients_are_tagged_variants():
    users = InMemoryUsers(customers={"c1"}, admins=["a1", "a2"])
    recipients = await NotificationFanout(InMemoryNotifications(), users).recipients_for(
        make_order(), NotificationType.payment_confirmed
    )
    assert recipients == [Individual("c1"), Collective(("a1", "a2"))]


def repair_uow(order_status=OrderStatus.paid, notifications=None) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(
        orders=InMemoryOrders([make_order(status=order_status)]),
        notifications=notifications or InMemoryNotifications(),
        users=InMemoryUsers(customers={"c1"}, admins=["a1", "a2", "a3"]),
    )


async def test_repair_recreates_missing_rows_once():
    uow = repair_uow()
    service = NotificationRepairService(uow)

    first = await service.repair_order("o1")
    second = await service.repair_order("o1")

    assert first.customer_created and first.admin_created
    assert not second.customer_created and not second.admin_created
    assert len(uow.notifications.rows) == 2


async def test_repair_fills_only_the_missing_audience():
    uow = repair_uow()
    await NotificationFanout(uow.notifications, uow.users).store(
        Individual("c1"), NotificationType.payment_confirmed, make_order(), {"orderId": "o1"}
    )

    result = await NotificationRepairService(uow).repair_order("o1")

    assert not result.customer_created
    assert result.admin_created
    assert len(uow.notifications.rows) == 2


async def test_repair_skips_unpaid_orders():
    uow = repair_uow(order_status=OrderStatus.pending)

    result = await NotificationRepairService(uow).repair_order("o1")

    assert result.skipped_reason == "order status is pending"
    assert uow.notifications.rows == []


async def test_repair_unknown_order():
    with pytest.raises(OrderLookupFailure):
        await NotificationRepairService(repair_uow()).repair_order("missing")


async def test_repair_recent_is_idempotent():
    uow = repair_uow(order_status=OrderStatus.completed)
    service = NotificationRepairService(uow)

    first = await service.repair_recent(hours=24)
    second = await service.repair_recent(hours=24)

    assert first.orders_checked == 1
    assert first.notifications_created == 2
    assert second.notifications_created == 0
    assert len(uow.notifications.rows) == 2

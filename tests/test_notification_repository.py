from sqlalchemy import func, select

from orderhook.models import NotificationRecipient
from orderhook.repositories.notifications import SqlNotificationRepository


async def add_collective(repo, order_id, admin_ids):
    return await repo.create_collective_admin_notification(
        type="payment-confirmed",
        admin_user_ids=admin_ids,
        order_id=order_id,
        title="Payment confirmed",
        message=f"Payment for order {order_id} confirmed",
        data={"orderId": order_id},
    )


async def test_collective_row_writes_one_membership_per_admin(session_factory):
    async with session_factory() as session:
        repo = SqlNotificationRepository(session)
        notification = await add_collective(repo, "o1", ["a1", "a2", "a1"])
        await session.commit()

        members = (
            await session.execute(
                select(NotificationRecipient.admin_user_id).where(
                    NotificationRecipient.notification_id == notification.id
                )
            )
        ).scalars().all()

    assert sorted(members) == ["a1", "a2"]
    assert notification.admin_user_ids == ["a1", "a2", "a1"]


async def test_admin_inbox_is_complete_beyond_recent_rows(session_factory):
    """
    Test: an admin addressed by hundreds of collective rows sees and clears all of them.
    """
    async with session_factory() as session:
        repo = SqlNotificationRepository(session)
        for i in range(520):
            await add_collective(repo, f"o{i}", ["a1", "a2"])
        for i in range(30):
            await add_collective(repo, f"other{i}", ["a2"])
        await session.commit()

    async with session_factory() as session:
        repo = SqlNotificationRepository(session)
        inbox = await repo.list_for_admin("a1", limit=1000)
        updated = await repo.mark_all_read_for_admin("a1")
        again = await repo.mark_all_read_for_admin("a1")
        await session.commit()

    assert len(inbox) == 520
    assert {n.order_id for n in inbox} == {f"o{i}" for i in range(520)}
    assert updated == 520
    assert again == 0

    async with session_factory() as session:
        repo = SqlNotificationRepository(session)
        a2_inbox = await repo.list_for_admin("a2", limit=1000)
        memberships = await session.scalar(
            select(func.count()).select_from(NotificationRecipient)
        )

    assert len(a2_inbox) == 550
    assert len([n for n in a2_inbox if not n.read]) == 30
    assert memberships == 520 * 2 + 30


async def test_empty_roster_has_no_memberships(session_factory):
    async with session_factory() as session:
        repo = SqlNotificationRepository(session)
        await add_collective(repo, "o1", [])
        await session.commit()
        assert await repo.list_for_admin("a1") == []
        assert await session.scalar(select(func.count()).select_from(NotificationRecipient)) == 0

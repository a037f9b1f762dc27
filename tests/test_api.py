import httpx
import pytest
from sqlalchemy import delete

from orderhook.api.deps import get_unit_of_work, get_webhook_service
from orderhook.core.database import get_db
from orderhook.main import app
from orderhook.models import Notification, NotificationRecipient
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from tests.fakes import API_KEY, payment_body, sign


@pytest.fixture
async def client(session_factory, webhook_service):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webhook_service] = lambda: webhook_service
    app.dependency_overrides[get_unit_of_work] = lambda: SqlUnitOfWork(session_factory)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def auth():
    return {"x-api-key": API_KEY}


async def post_webhook(client, body: bytes, signature: str):
    return await client.post(
        "/api/v1/webhooks/payments",
        content=body,
        headers={"sign": signature, "content-type": "application/json"},
    )


async def test_webhook_endpoint_processes_signed_callback(client, seeded_users):
    body = payment_body()

    response = await post_webhook(client, body, sign(body))

    assert response.status_code == 200
    assert response.json() == {
        "received": True,
        "status": "processed",
        "message": "Order created: paid",
        "order_id": "o1",
    }


async def test_webhook_endpoint_rejects_bad_signature(client):
    response = await post_webhook(client, payment_body(), "0" * 32)

    assert response.status_code == 401
    assert response.json()["received"] is False


async def test_webhook_endpoint_acknowledges_duplicates(client, seeded_users):
    body = payment_body()
    await post_webhook(client, body, sign(body))

    response = await post_webhook(client, body, sign(body))

    assert response.status_code == 200
    assert response.json()["status"] == "already_processed"


async def test_webhook_endpoint_rejects_malformed_payload(client):
    body = b'{"order_id": "o1"}'

    response = await post_webhook(client, body, sign(body))

    assert response.status_code == 400


async def test_operator_endpoints_require_api_key(client):
    response = await client.get("/api/v1/notifications/users/c1")
    assert response.status_code == 401

    response = await client.get(
        "/api/v1/notifications/users/c1", headers={"x-api-key": "wrong"}
    )
    assert response.status_code == 401


async def test_order_status_endpoint_advances_and_conflicts(client, add_order):
    await add_order(status="paid")

    response = await client.patch(
        "/api/v1/orders/o1/status", json={"status": "processing"}, headers=auth()
    )
    assert response.status_code == 200
    assert response.json()["status"] == "processing"

    response = await client.patch(
        "/api/v1/orders/o1/status", json={"status": "paid"}, headers=auth()
    )
    assert response.status_code == 409

    response = await client.patch(
        "/api/v1/orders/missing/status", json={"status": "paid"}, headers=auth()
    )
    assert response.status_code == 404

    response = await client.get("/api/v1/orders/o1", headers=auth())
    assert response.json()["status"] == "processing"


async def test_notification_listing_and_read_state(client, seeded_users):
    body = payment_body()
    await post_webhook(client, body, sign(body))

    customer = (await client.get("/api/v1/notifications/users/c1", headers=auth())).json()
    assert len(customer) == 1
    assert customer[0]["order_id"] == "o1"

    for admin_id in seeded_users["admins"]:
        inbox = (await client.get(f"/api/v1/notifications/admins/{admin_id}", headers=auth())).json()
        assert len(inbox) == 1
        assert inbox[0]["is_collective_admin_notification"] is True

    response = await client.post(
        f"/api/v1/notifications/{customer[0]['id']}/read", headers=auth()
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 1}

    response = await client.post("/api/v1/notifications/admins/a1/read-all", headers=auth())
    assert response.json()["updated"] == 1
    response = await client.post("/api/v1/notifications/admins/a1/read-all", headers=auth())
    assert response.json()["updated"] == 0

    response = await client.post("/api/v1/notifications/does-not-exist/read", headers=auth())
    assert response.status_code == 404


async def test_repair_endpoint_restores_lost_notifications(client, session_factory, seeded_users):
    body = payment_body()
    await post_webhook(client, body, sign(body))
    async with session_factory() as session:
        await session.execute(delete(NotificationRecipient))
        await session.execute(delete(Notification))
        await session.commit()

    first = await client.post("/api/v1/notifications/repair/o1", headers=auth())
    second = await client.post("/api/v1/notifications/repair/o1", headers=auth())

    assert first.status_code == 200
    assert first.json()["customer_created"] is True
    assert first.json()["admin_created"] is True
    assert second.json()["customer_created"] is False
    assert second.json()["admin_created"] is False

    sweep = await client.post("/api/v1/notifications/repair?hours=1", headers=auth())
    assert sweep.json()["orders_checked"] == 1
    assert sweep.json()["notifications_created"] == 0

    missing = await client.post("/api/v1/notifications/repair/nope", headers=auth())
    assert missing.status_code == 404


async def test_health_endpoints(client):
    assert (await client.get("/health")).json() == {"status": "healthy"}

    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert response.json()["status"] == "healthy"
    assert response.json()["webhook_secret_configured"] is True
    assert response.json()["last_webhook_at"] is None

"""Integration tests for the gateway proxy in front of the services."""

import httpx
import pytest

from libs.common import service_client
from libs.common.middleware import accepted_request_id
from tests.factories import DEFAULT_PASSWORD, AccountFactory, EventFactory, bearer


class UnreachableClient(service_client.ServiceClient):
    async def _request(self, method, path, **kwargs):
        raise httpx.ConnectError("connection refused")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_login_and_me_through_gateway(client, db_session):
    account = AccountFactory.member()
    db_session.add(account)
    await db_session.commit()

    login = await client.post(
        "/api/v1/auth/login",
        json={"email": account.email, "password": DEFAULT_PASSWORD},
    )
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == account.email


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upstream_errors_are_relayed(client, db_session):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    response = await client.get("/api/v1/admin/users", headers=bearer(account))

    assert response.status_code == 403
    assert response.json()["code"] == "ADMIN_REQUIRED"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_is_echoed(client):
    response = await client.get("/api/v1/events", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_malformed_request_id_is_replaced(client):
    supplied = "x" * 65
    response = await client.get("/api/v1/events", headers={"X-Request-ID": supplied})

    assert response.status_code == 200
    echoed = response.headers["X-Request-ID"]
    assert echoed != supplied
    assert accepted_request_id(echoed) == echoed


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,accepted",
    [
        ("req-123", True),
        ("3f0e8f0e.0000_4000", True),
        ("", False),
        (None, False),
        ("has spaces", False),
        ("x" * 65, False),
    ],
)
def test_accepted_request_id(value, accepted):
    assert (accepted_request_id(value) is not None) is accepted


@pytest.mark.asyncio
@pytest.mark.integration
async def test_query_parameters_are_forwarded(client, db_session):
    draft = EventFactory.create(is_published=False)
    db_session.add_all([EventFactory.create(), EventFactory.create(), draft])
    await db_session.commit()

    response = await client.get("/api/v1/events", params={"limit": 1})

    assert response.status_code == 200
    assert len(response.json()["items"]) == 1
    assert response.json()["total"] == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unreachable_service_returns_502(client, monkeypatch):
    monkeypatch.setattr(service_client, "events_client", UnreachableClient("http://down"))

    response = await client.get("/api/v1/events")

    assert response.status_code == 502
    assert response.json()["detail"] == "Service unavailable"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_membership_order_shortcut(client, db_session, fake_gateway):
    account = AccountFactory.create()
    db_session.add(account)
    await db_session.commit()

    created = await client.post("/api/v1/membership/create-order", headers=bearer(account))
    assert created.status_code == 201, created.text
    assert created.json()["purpose"] == "membership"

    verified = await client.post(
        "/api/v1/membership/verify-payment",
        json=fake_gateway.receipt(created.json()["order_id"]),
        headers=bearer(account),
    )
    assert verified.status_code == 200, verified.text

    me = await client.get("/api/v1/auth/me", headers=bearer(account))
    assert me.json()["is_member"] is True

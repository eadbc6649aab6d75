"""API tests for checkout endpoints."""

import pytest

from sumvid.api.conftest import _auth_headers
from sumvid.domains.users.tests.conftest import _make_user


class TestCreateSession:
    """Tests for POST /checkout/create-session."""

    @pytest.mark.asyncio
    async def test_guest_gets_a_session(self, client, fake_payment_gateway):
        response = await client.post("/checkout/create-session")

        assert response.status_code == 200
        data = response.json()
        assert data["sessionId"].startswith("cs_")
        assert data["url"].endswith(data["sessionId"])
        assert fake_payment_gateway.call_count("create_customer") == 1

    @pytest.mark.asyncio
    async def test_invalid_token_falls_back_to_guest(self, client):
        response = await client.post(
            "/checkout/create-session", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_user_customer_is_stored(self, client, fake_user_repo, fake_payment_gateway):
        fake_user_repo.seed(_make_user())

        response = await client.post("/checkout/create-session", headers=_auth_headers())

        assert response.status_code == 200
        ((email,), _), = fake_payment_gateway.calls_for("create_customer")
        assert email == "user1@example.com"
        assert fake_user_repo.snapshot(1).stripe_customer_id is not None


class TestSessionStatus:
    """Tests for GET /checkout/session-status."""

    @pytest.mark.asyncio
    async def test_requires_session_id(self, client):
        response = await client.get("/checkout/session-status")

        assert response.status_code == 400
        assert response.json()["detail"] == "Session ID is required"

    @pytest.mark.asyncio
    async def test_returns_status(self, client):
        response = await client.get("/checkout/session-status", params={"session_id": "cs_done"})

        assert response.status_code == 200
        assert response.json() == {
            "status": "complete",
            "customer": "cus_fake",
            "subscription": "sub_fake",
            "paymentStatus": "paid",
        }

"""API tests for user endpoints.

Runs the real QuotaService and UserService over FakeUserRepository, so the
assertions cover routing, auth, serialization and the quota rules together.
"""

import pytest

from sumvid.api.conftest import _auth_headers
from sumvid.api.auth import authenticate
from sumvid.domains.billing.types import UNLIMITED_SENTINEL
from sumvid.domains.users.tests.conftest import _make_user


class TestRegister:
    """Tests for POST /user/register."""

    @pytest.mark.asyncio
    async def test_register_returns_token_and_freemium_profile(self, client, fake_user_repo):
        response = await client.post(
            "/user/register", json={"email": "New@Example.com", "name": "New"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["subscriptionStatus"] == "freemium"
        assert data["usage"] == {
            "used": 0,
            "limit": 10,
            "subscriptionStatus": "freemium",
            "remaining": 10,
        }
        assert authenticate(data["token"]) == data["user"]["id"]
        assert fake_user_repo.snapshot(data["user"]["id"]) is not None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user(email="taken@example.com"))

        response = await client.post("/user/register", json={"email": "taken@example.com"})

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_invalid_email_is_422(self, client):
        response = await client.post("/user/register", json={"email": "not-an-email"})

        assert response.status_code == 422
        assert response.json()["kind"] == "validation_error"


class TestUsage:
    """Tests for GET /user/usage."""

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/user/usage")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"] == "Access token required"

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, client):
        response = await client.get("/user/usage", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_returns_counters(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())

        response = await client.get("/user/usage", headers=_auth_headers())

        assert response.status_code == 200
        assert response.json() == {
            "used": 0,
            "limit": 10,
            "subscriptionStatus": "freemium",
            "remaining": 10,
        }

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client):
        response = await client.get("/user/usage", headers=_auth_headers(404))

        assert response.status_code == 404


class TestIncrementUsage:
    """Tests for POST /user/increment-usage."""

    @pytest.mark.asyncio
    async def test_increments(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())

        response = await client.post("/user/increment-usage", headers=_auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["usage"]["used"] == 1
        assert data["usage"]["remaining"] == 9

    @pytest.mark.asyncio
    async def test_limit_reached_is_400_with_usage(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user())
        for _ in range(10):
            response = await client.post("/user/increment-usage", headers=_auth_headers())
            assert response.status_code == 200

        response = await client.post("/user/increment-usage", headers=_auth_headers())

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Daily usage limit reached"
        assert data["usage"]["used"] == 10
        assert data["usage"]["remaining"] == 0

    @pytest.mark.asyncio
    async def test_premium_is_unlimited(self, client, fake_user_repo):
        fake_user_repo.seed(
            _make_user(
                usage_count=250,
                usage_limit=UNLIMITED_SENTINEL,
                subscription_status="premium",
            )
        )

        response = await client.post("/user/increment-usage", headers=_auth_headers())

        assert response.status_code == 200
        assert response.json()["usage"]["limit"] == UNLIMITED_SENTINEL


class TestProfile:
    """Tests for GET /user/profile and POST /user/refresh-subscription."""

    @pytest.mark.asyncio
    async def test_profile(self, client, fake_user_repo):
        fake_user_repo.seed(_make_user(name="Ada", stripe_customer_id="cus_1"))

        response = await client.get("/user/profile", headers=_auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ada"
        assert data["stripeCustomerId"] == "cus_1"
        assert data["usageLimit"] == 10
        assert data["lastResetDate"] is not None

    @pytest.mark.asyncio
    async def test_refresh_subscription_upgrades(
        self, client, fake_user_repo, fake_payment_gateway
    ):
        fake_user_repo.seed(_make_user())
        fake_payment_gateway.seed_customer("cus_paid", email="user1@example.com")
        fake_payment_gateway.seed_subscription("cus_paid", "sub_1", "active")

        response = await client.post("/user/refresh-subscription", headers=_auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["subscriptionStatus"] == "premium"
        assert data["usageLimit"] == UNLIMITED_SENTINEL
        assert data["stripeCustomerId"] == "cus_paid"

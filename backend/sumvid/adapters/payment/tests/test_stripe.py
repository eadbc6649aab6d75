"""Unit tests for StripePaymentGateway.

Mocks the StripeClient so we can test retry, error conversion and the
request shapes without reaching Stripe.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import stripe

from sumvid.adapters.payment.stripe import StripePaymentGateway
from sumvid.core.exceptions import ExternalServiceError
from sumvid.domains.billing.exceptions import WebhookSignatureError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_list(*items):
    m = MagicMock()
    m.data = list(items)
    return m


def _mock_customer(**overrides):
    defaults = dict(id="cus_123", email="a@example.com", deleted=False)
    defaults.update(overrides)
    m = MagicMock()
    for k, v in defaults.items():
        setattr(m, k, v)
    return m


@pytest.fixture
def client():
    """StripeClient with every async resource method mocked."""
    c = MagicMock()
    c.customers.retrieve_async = AsyncMock(return_value=_mock_customer())
    c.customers.list_async = AsyncMock(return_value=_mock_list(_mock_customer()))
    c.customers.create_async = AsyncMock(return_value=_mock_customer())
    c.subscriptions.list_async = AsyncMock(return_value=_mock_list())
    c.checkout.sessions.create_async = AsyncMock(return_value=MagicMock(id="cs_1"))
    c.checkout.sessions.retrieve_async = AsyncMock(return_value=MagicMock(id="cs_1"))
    return c


@pytest.fixture
def gateway(client):
    return StripePaymentGateway(webhook_secret="whsec_unit", max_attempts=2, client=client)


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class TestCustomers:
    @pytest.mark.asyncio
    async def test_get_customer(self, gateway, client):
        customer = await gateway.get_customer("cus_123")

        assert customer.id == "cus_123"
        client.customers.retrieve_async.assert_awaited_once_with(customer="cus_123")

    @pytest.mark.asyncio
    async def test_deleted_customer_is_none(self, gateway, client):
        client.customers.retrieve_async.return_value = _mock_customer(deleted=True)
        assert await gateway.get_customer("cus_123") is None

    @pytest.mark.asyncio
    async def test_missing_customer_is_none(self, gateway, client):
        client.customers.retrieve_async.side_effect = stripe.InvalidRequestError(
            "No such customer: 'cus_gone'", "customer", code="resource_missing"
        )
        assert await gateway.get_customer("cus_gone") is None

    @pytest.mark.asyncio
    async def test_other_invalid_request_is_raised(self, gateway, client):
        client.customers.retrieve_async.side_effect = stripe.InvalidRequestError(
            "Bad id", "customer", code="parameter_invalid"
        )
        with pytest.raises(ExternalServiceError):
            await gateway.get_customer("bogus")

    @pytest.mark.asyncio
    async def test_find_by_email(self, gateway, client):
        customers = await gateway.find_customers_by_email("a@example.com", limit=5)

        assert [c.id for c in customers] == ["cus_123"]
        client.customers.list_async.assert_awaited_once_with(
            params={"email": "a@example.com", "limit": 5}
        )

    @pytest.mark.asyncio
    async def test_create_without_email_omits_it(self, gateway, client):
        await gateway.create_customer(metadata={"userId": "7"})

        client.customers.create_async.assert_awaited_once_with(
            params={"metadata": {"userId": "7"}}
        )


# ---------------------------------------------------------------------------
# Checkout and subscriptions
# ---------------------------------------------------------------------------


class TestCheckout:
    @pytest.mark.asyncio
    async def test_session_params(self, gateway, client):
        await gateway.create_checkout_session(
            "cus_123",
            "price_1",
            success_url="https://app/success",
            cancel_url="https://app/cancel",
            metadata={"userId": "1"},
        )

        params = client.checkout.sessions.create_async.call_args.kwargs["params"]
        assert params["mode"] == "subscription"
        assert params["customer"] == "cus_123"
        assert params["line_items"] == [{"price": "price_1", "quantity": 1}]
        assert params["subscription_data"] == {"metadata": {"userId": "1"}}

    @pytest.mark.asyncio
    async def test_list_subscriptions_includes_all_statuses(self, gateway, client):
        await gateway.list_subscriptions("cus_123")

        client.subscriptions.list_async.assert_awaited_once_with(
            params={"customer": "cus_123", "status": "all", "limit": 10}
        )


# ---------------------------------------------------------------------------
# Retry and error conversion
# ---------------------------------------------------------------------------


class TestRetry:
    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, gateway, client):
        session = MagicMock(id="cs_ok")
        client.checkout.sessions.retrieve_async.side_effect = [
            stripe.APIConnectionError("connection reset"),
            session,
        ]

        result = await gateway.retrieve_checkout_session("cs_ok")

        assert result is session
        assert client.checkout.sessions.retrieve_async.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_become_external_error(self, gateway, client):
        client.subscriptions.list_async.side_effect = stripe.RateLimitError("slow down")

        with pytest.raises(ExternalServiceError) as exc_info:
            await gateway.list_subscriptions("cus_123")

        assert exc_info.value.service_name == "Stripe"
        assert client.subscriptions.list_async.await_count == 2

    @pytest.mark.asyncio
    async def test_card_error_is_not_retried(self, gateway, client):
        client.customers.create_async.side_effect = stripe.CardError(
            "declined", "card", "card_declined"
        )

        with pytest.raises(ExternalServiceError):
            await gateway.create_customer(email="a@example.com")

        assert client.customers.create_async.await_count == 1


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


class TestWebhooks:
    def test_has_secret(self, gateway):
        assert gateway.has_webhook_secret()

    def test_valid_signature(self, gateway, client):
        event = MagicMock(id="evt_1")
        client.construct_event.return_value = event

        assert gateway.verify_webhook_signature(b"{}", "t=1,v1=abc") is event
        client.construct_event.assert_called_once_with(b"{}", "t=1,v1=abc", "whsec_unit")

    def test_bad_signature(self, gateway, client):
        client.construct_event.side_effect = stripe.SignatureVerificationError(
            "No signatures found", "t=1,v1=bad"
        )
        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook_signature(b"{}", "t=1,v1=bad")

    def test_bad_payload(self, gateway, client):
        client.construct_event.side_effect = ValueError("Expecting value")
        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook_signature(b"not json", "t=1,v1=abc")

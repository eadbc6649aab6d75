"""Tests for NullPaymentGateway."""

import pytest

from sumvid.adapters.payment.null import NullPaymentGateway
from sumvid.domains.billing.exceptions import BillingNotAvailableError, WebhookSignatureError


@pytest.fixture
def gateway():
    return NullPaymentGateway()


class TestLookups:
    @pytest.mark.asyncio
    async def test_lookups_are_empty(self, gateway):
        assert await gateway.get_customer("cus_1") is None
        assert await gateway.find_customers_by_email("a@example.com") == []
        assert await gateway.list_subscriptions("cus_1") == []


class TestUnavailable:
    @pytest.mark.asyncio
    async def test_checkout_raises(self, gateway):
        with pytest.raises(BillingNotAvailableError):
            await gateway.create_checkout_session("cus_1", "price_1", "s", "c")
        with pytest.raises(BillingNotAvailableError):
            await gateway.create_customer(email="a@example.com")
        with pytest.raises(BillingNotAvailableError):
            await gateway.retrieve_checkout_session("cs_1")

    def test_webhooks_cannot_be_verified(self, gateway):
        assert not gateway.has_webhook_secret()
        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook_signature(b"{}", "sig")

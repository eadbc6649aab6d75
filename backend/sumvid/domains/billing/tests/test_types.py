"""Tests for entitlement rules and Stripe field helpers."""

from dataclasses import dataclass
from typing import Optional

import pytest

from sumvid.adapters.payment.fake import _obj
from sumvid.domains.billing.types import (
    BASE_LIMIT,
    UNLIMITED_SENTINEL,
    EntitlementResolver,
    SubscriptionStatus,
    WebhookOutcome,
    WebhookOutcomeStatus,
    stripe_field,
    stripe_object_id,
)


@dataclass
class ProviderCase:
    provider_status: Optional[str]
    expected: Optional[SubscriptionStatus]


PROVIDER_CASES = [
    ProviderCase("active", SubscriptionStatus.PREMIUM),
    ProviderCase("trialing", SubscriptionStatus.PREMIUM),
    ProviderCase("canceled", SubscriptionStatus.FREEMIUM),
    ProviderCase("unpaid", SubscriptionStatus.FREEMIUM),
    ProviderCase("past_due", SubscriptionStatus.FREEMIUM),
    ProviderCase("incomplete", None),
    ProviderCase("incomplete_expired", None),
    ProviderCase("paused", None),
    ProviderCase(None, None),
]


@pytest.mark.parametrize("case", PROVIDER_CASES, ids=lambda c: str(c.provider_status))
def test_status_for_provider(case: ProviderCase):
    assert EntitlementResolver.status_for_provider(case.provider_status) == case.expected


class TestResolve:
    def test_premium_is_unlimited_and_keeps_subscription(self):
        entitlement = EntitlementResolver().resolve(SubscriptionStatus.PREMIUM)

        assert entitlement.usage_limit == UNLIMITED_SENTINEL
        assert entitlement.keeps_subscription_id is True
        assert EntitlementResolver.is_unlimited(entitlement.usage_limit)

    def test_freemium_uses_base_limit(self):
        entitlement = EntitlementResolver().resolve(SubscriptionStatus.FREEMIUM)

        assert entitlement.usage_limit == BASE_LIMIT
        assert entitlement.keeps_subscription_id is False
        assert not EntitlementResolver.is_unlimited(entitlement.usage_limit)

    def test_custom_base_limit(self):
        resolver = EntitlementResolver(base_limit=25)
        assert resolver.resolve(SubscriptionStatus.FREEMIUM).usage_limit == 25

    def test_base_limit_must_stay_below_sentinel(self):
        with pytest.raises(ValueError):
            EntitlementResolver(base_limit=UNLIMITED_SENTINEL)


class TestStripeHelpers:
    def test_field_reads_dicts_and_objects(self):
        assert stripe_field({"a": 1}, "a") == 1
        assert stripe_field(_obj(a=2), "a") == 2
        assert stripe_field(None, "a") is None
        assert stripe_field(_obj(), "missing") is None

    def test_object_id_accepts_id_or_expanded(self):
        assert stripe_object_id("cus_1") == "cus_1"
        assert stripe_object_id(_obj(id="cus_2")) == "cus_2"
        assert stripe_object_id({"id": "cus_3"}) == "cus_3"
        assert stripe_object_id(None) is None


def test_only_duplicates_carry_a_message():
    dup = WebhookOutcome("evt", "t", WebhookOutcomeStatus.DUPLICATE)
    done = WebhookOutcome("evt", "t", WebhookOutcomeStatus.PROCESSED)

    assert dup.message == "Event already processed"
    assert done.message is None

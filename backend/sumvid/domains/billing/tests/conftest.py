"""Billing domain test fixtures and helpers.

Provides helpers for contexts, service wiring and Stripe event shapes.
"""

from typing import Any, Optional

import pytest

from sumvid.adapters.payment.fake import FakePaymentGateway, _obj
from sumvid.api.context import ApiContext
from sumvid.core.logging import logger
from sumvid.core.shared_models import AuthMethod
from sumvid.domains.billing.fakes.ledger import FakeProcessedEventLedger
from sumvid.domains.billing.service import CheckoutOrchestrator
from sumvid.domains.billing.types import EntitlementResolver
from sumvid.domains.billing.webhook_processor import SubscriptionSync
from sumvid.domains.users.fakes.repository import FakeUserRepository

FRONTEND_URL = "https://app.sumvid.test"
PRICE_ID = "price_premium"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_ctx(user_id: Optional[int] = 1) -> ApiContext:
    """Build a minimal ApiContext for tests."""
    auth_method = AuthMethod.BEARER if user_id is not None else AuthMethod.GUEST
    return ApiContext(
        user_id=user_id,
        auth_method=auth_method,
        request_id="test-req-001",
        logger=logger.with_context(request_id="test-req-001"),
    )


def _make_sync(
    *,
    payment_gateway: Optional[FakePaymentGateway] = None,
    user_repo: Optional[FakeUserRepository] = None,
    ledger: Optional[FakeProcessedEventLedger] = None,
    event_retention: int = 1000,
) -> tuple[SubscriptionSync, FakePaymentGateway, FakeUserRepository, FakeProcessedEventLedger]:
    """Build a SubscriptionSync wired to fakes. Returns (processor, *fakes)."""
    gw = payment_gateway or FakePaymentGateway()
    repo = user_repo or FakeUserRepository()
    led = ledger or FakeProcessedEventLedger()
    proc = SubscriptionSync(
        payment_gateway=gw,
        user_repo=repo,
        ledger=led,
        resolver=EntitlementResolver(),
        event_retention=event_retention,
    )
    return proc, gw, repo, led


def _make_checkout(
    *,
    payment_gateway: Optional[FakePaymentGateway] = None,
    user_repo: Optional[FakeUserRepository] = None,
    price_id: Optional[str] = PRICE_ID,
) -> tuple[CheckoutOrchestrator, FakePaymentGateway, FakeUserRepository]:
    """Build a CheckoutOrchestrator wired to fakes. Returns (orchestrator, *fakes)."""
    gw = payment_gateway or FakePaymentGateway()
    repo = user_repo or FakeUserRepository()
    svc = CheckoutOrchestrator(
        payment_gateway=gw, user_repo=repo, price_id=price_id, frontend_url=FRONTEND_URL
    )
    return svc, gw, repo


def _make_stripe_event(event_type: str, data_object: Any, event_id: str = "evt_test") -> _obj:
    """Build a minimal Stripe event attribute-bag."""
    return _obj(type=event_type, id=event_id, data=_obj(object=data_object))


def _make_subscription_obj(**overrides: Any) -> _obj:
    """Build a fake Stripe subscription attribute-bag with defaults."""
    defaults = dict(id="sub_test", customer="cus_test", status="active", metadata={})
    defaults.update(overrides)
    return _obj(**defaults)


def _make_invoice_obj(**overrides: Any) -> _obj:
    """Build a fake Stripe invoice attribute-bag."""
    defaults = dict(
        id="in_test", customer="cus_test", subscription="sub_test", attempt_count=1
    )
    defaults.update(overrides)
    return _obj(**defaults)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def ctx():
    """ApiContext for authenticated user 1."""
    return _make_ctx()

"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before the colocated test packages under sumvid/,
making its fixtures available to every domain, adapter and API test.
"""

import os
from unittest.mock import AsyncMock

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any sumvid module import
# Uses setdefault so real env vars (CI, e2e) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-at-least-32-characters-long")
os.environ.setdefault("STRIPE_ENABLED", "false")
os.environ.setdefault("STRIPE_PRICE_ID", "price_test")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")
os.environ.setdefault("RUN_ALEMBIC_MIGRATIONS", "false")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def db():
    """AsyncMock database session; fakes ignore it."""
    return AsyncMock()


@pytest.fixture
def fake_payment_gateway():
    """Fake PaymentGateway that records calls and keeps customers in memory."""
    from sumvid.adapters.payment.fake import FakePaymentGateway

    return FakePaymentGateway()


@pytest.fixture
def fake_generation_client():
    """Fake GenerationClient returning a canned completion."""
    from sumvid.adapters.generation.fake import FakeGenerationClient

    return FakeGenerationClient()


@pytest.fixture
def fake_user_repo():
    """In-memory user repository with atomic conditional updates."""
    from sumvid.domains.users.fakes.repository import FakeUserRepository

    return FakeUserRepository()


@pytest.fixture
def fake_event_ledger():
    """In-memory processed-event ledger."""
    from sumvid.domains.billing.fakes.ledger import FakeProcessedEventLedger

    return FakeProcessedEventLedger()


@pytest.fixture
def test_container(
    fake_payment_gateway,
    fake_generation_client,
    fake_user_repo,
    fake_event_ledger,
):
    """A Container with real services wired to fakes.

    Use this when testing code that receives a Container or individual
    protocols via dependency injection.

    For partial overrides, use container.replace():
        c = test_container.replace(payment_gateway=NullPaymentGateway())
    """
    from sumvid.core.container import Container
    from sumvid.domains.billing.service import CheckoutOrchestrator
    from sumvid.domains.billing.types import BASE_LIMIT, EntitlementResolver
    from sumvid.domains.billing.webhook_processor import SubscriptionSync
    from sumvid.domains.generation.service import GenerationService
    from sumvid.domains.usage.service import QuotaService
    from sumvid.domains.users.service import UserService

    resolver = EntitlementResolver(base_limit=BASE_LIMIT)
    quota_service = QuotaService(user_repo=fake_user_repo)

    return Container(
        payment_gateway=fake_payment_gateway,
        generation_client=fake_generation_client,
        user_repo=fake_user_repo,
        event_ledger=fake_event_ledger,
        entitlement_resolver=resolver,
        quota_service=quota_service,
        subscription_sync=SubscriptionSync(
            payment_gateway=fake_payment_gateway,
            user_repo=fake_user_repo,
            ledger=fake_event_ledger,
            resolver=resolver,
        ),
        checkout_service=CheckoutOrchestrator(
            payment_gateway=fake_payment_gateway,
            user_repo=fake_user_repo,
            price_id="price_test",
            frontend_url="http://localhost:3000",
        ),
        generation_service=GenerationService(quota=quota_service, client=fake_generation_client),
        user_service=UserService(user_repo=fake_user_repo, resolver=resolver),
    )

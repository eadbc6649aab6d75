"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations.

Design principles:
- Single place for all wiring decisions
- Stripe and OpenAI are optional: missing keys select null adapters
- Fail fast: broken wiring crashes at startup, not on the first request
"""

from sumvid.core.config import Settings
from sumvid.core.container.container import Container
from sumvid.core.logging import logger
from sumvid.core.protocols import GenerationClient, PaymentGatewayProtocol
from sumvid.domains.billing.ledger import ProcessedEventLedger
from sumvid.domains.billing.service import CheckoutOrchestrator
from sumvid.domains.billing.types import EntitlementResolver
from sumvid.domains.billing.webhook_processor import SubscriptionSync
from sumvid.domains.generation.service import GenerationService
from sumvid.domains.usage.service import QuotaService
from sumvid.domains.users.repository import UserRepository
from sumvid.domains.users.service import UserService


def create_container(settings: Settings) -> Container:
    """Build container with environment-appropriate implementations.

    This is the single source of truth for dependency wiring. It reads
    the settings and decides which adapter implementation to use for
    each protocol.

    Args:
        settings: Application settings (from core/config)

    Returns:
        Fully constructed Container ready for use
    """
    user_repo = UserRepository()
    resolver = EntitlementResolver(base_limit=settings.FREEMIUM_DAILY_LIMIT)
    quota_service = QuotaService(user_repo=user_repo)
    generation_client = _create_generation_client(settings)

    # -----------------------------------------------------------------
    # Billing services
    # -----------------------------------------------------------------
    billing_services = _create_billing_services(settings, user_repo, resolver)

    return Container(
        payment_gateway=billing_services["payment_gateway"],
        generation_client=generation_client,
        user_repo=user_repo,
        event_ledger=billing_services["event_ledger"],
        entitlement_resolver=resolver,
        quota_service=quota_service,
        subscription_sync=billing_services["subscription_sync"],
        checkout_service=billing_services["checkout_service"],
        generation_service=GenerationService(quota=quota_service, client=generation_client),
        user_service=UserService(user_repo=user_repo, resolver=resolver),
    )


# ---------------------------------------------------------------------------
# Private factory functions for each dependency
# ---------------------------------------------------------------------------


def _create_payment_gateway(settings: Settings) -> PaymentGatewayProtocol:
    """Create payment gateway: Stripe if enabled, otherwise a null implementation."""
    if settings.STRIPE_ENABLED:
        from sumvid.adapters.payment.stripe import StripePaymentGateway

        return StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            timeout_seconds=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS,
            max_attempts=settings.PAYMENT_GATEWAY_MAX_ATTEMPTS,
        )

    from sumvid.adapters.payment.null import NullPaymentGateway

    logger.info("Stripe disabled, billing endpoints will report billing as unavailable")
    return NullPaymentGateway()


def _create_generation_client(settings: Settings) -> GenerationClient:
    """Create generation client: OpenAI if a key is configured, otherwise null."""
    if settings.OPENAI_API_KEY:
        from sumvid.adapters.generation.openai import OpenAIGenerationClient

        return OpenAIGenerationClient(
            api_key=settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL
        )

    from sumvid.adapters.generation.null import NullGenerationClient

    logger.warning("OPENAI_API_KEY not set, generation endpoints will fail with 502")
    return NullGenerationClient()


def _create_billing_services(
    settings: Settings, user_repo: UserRepository, resolver: EntitlementResolver
) -> dict:
    """Create the webhook processor and checkout orchestrator with shared dependencies."""
    payment_gateway = _create_payment_gateway(settings)
    event_ledger = ProcessedEventLedger()

    subscription_sync = SubscriptionSync(
        payment_gateway=payment_gateway,
        user_repo=user_repo,
        ledger=event_ledger,
        resolver=resolver,
        event_retention=settings.PROCESSED_EVENT_RETENTION,
    )
    checkout_service = CheckoutOrchestrator(
        payment_gateway=payment_gateway,
        user_repo=user_repo,
        price_id=settings.STRIPE_PRICE_ID,
        frontend_url=settings.FRONTEND_URL,
    )

    return {
        "payment_gateway": payment_gateway,
        "event_ledger": event_ledger,
        "subscription_sync": subscription_sync,
        "checkout_service": checkout_service,
    }

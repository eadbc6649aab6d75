"""Billing domain types and shared pure functions.

Entitlement constants and the resolver that maps a subscription status onto
the user columns it implies. Read by the quota service, written through by
the webhook processor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

BASE_LIMIT = 10
UNLIMITED_SENTINEL = 999999

# Stripe subscription statuses that grant Premium.
ACTIVE_PROVIDER_STATUSES = frozenset({"active", "trialing"})
# Stripe subscription statuses that revoke Premium.
INACTIVE_PROVIDER_STATUSES = frozenset({"canceled", "unpaid", "past_due"})


class SubscriptionStatus(str, Enum):
    """Local entitlement state stored on the user row."""

    FREEMIUM = "freemium"
    PREMIUM = "premium"


@dataclass(frozen=True)
class Entitlement:
    """The user columns implied by a subscription status.

    ``keeps_subscription_id`` is False when the stored Stripe subscription id
    must be cleared along with the status change.
    """

    status: SubscriptionStatus
    usage_limit: int
    keeps_subscription_id: bool


class EntitlementResolver:
    """Pure mapping between subscription states and usage ceilings."""

    def __init__(self, base_limit: int = BASE_LIMIT) -> None:
        """Initialize with the Freemium daily limit."""
        if base_limit >= UNLIMITED_SENTINEL:
            raise ValueError("base_limit must be below the unlimited sentinel")
        self.base_limit = base_limit

    def resolve(self, status: SubscriptionStatus) -> Entitlement:
        """Return the entitlement for a local status."""
        if status == SubscriptionStatus.PREMIUM:
            return Entitlement(
                status=SubscriptionStatus.PREMIUM,
                usage_limit=UNLIMITED_SENTINEL,
                keeps_subscription_id=True,
            )
        return Entitlement(
            status=SubscriptionStatus.FREEMIUM,
            usage_limit=self.base_limit,
            keeps_subscription_id=False,
        )

    @staticmethod
    def status_for_provider(provider_status: Optional[str]) -> Optional[SubscriptionStatus]:
        """Map a Stripe subscription status onto a local status.

        Returns None for statuses that should not change anything
        (``incomplete``, ``incomplete_expired``, ``paused``, unknown values).
        """
        if provider_status in ACTIVE_PROVIDER_STATUSES:
            return SubscriptionStatus.PREMIUM
        if provider_status in INACTIVE_PROVIDER_STATUSES:
            return SubscriptionStatus.FREEMIUM
        return None

    @staticmethod
    def is_unlimited(usage_limit: int) -> bool:
        """Interpret a stored usage_limit."""
        return usage_limit >= UNLIMITED_SENTINEL


class WebhookOutcomeStatus(str, Enum):
    """What happened to a verified webhook event."""

    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass(frozen=True)
class WebhookOutcome:
    """Result of processing one webhook event.

    Every outcome is acknowledged to Stripe; ``error`` is set only for FAILED.
    """

    event_id: str
    event_type: str
    status: WebhookOutcomeStatus
    error: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        """Human-readable note for the acknowledgement body."""
        if self.status == WebhookOutcomeStatus.DUPLICATE:
            return "Event already processed"
        return None


@dataclass(frozen=True)
class CheckoutSession:
    """A hosted checkout session the client should be redirected to."""

    session_id: str
    url: str


@dataclass(frozen=True)
class CheckoutSessionStatus:
    """Read-only view of a checkout session."""

    status: Optional[str]
    customer: Optional[str]
    subscription: Optional[str]
    payment_status: Optional[str]


def stripe_field(obj: Any, name: str) -> Any:
    """Read a field from a Stripe object, a plain dict, or a test attribute-bag."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def stripe_object_id(value: Any) -> Optional[str]:
    """Return the id of an expandable Stripe field (id string or expanded object)."""
    if value is None or isinstance(value, str):
        return value
    return stripe_field(value, "id")

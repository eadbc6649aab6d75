"""Billing domain protocols.

CheckoutServiceProtocol: what checkout endpoints need injected.
SubscriptionSyncProtocol: webhook processing and on-demand reconciliation.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.domains.billing.types import CheckoutSession, CheckoutSessionStatus, WebhookOutcome
from sumvid.models.user import User


@runtime_checkable
class CheckoutServiceProtocol(Protocol):
    """Starts and inspects Stripe checkout sessions."""

    async def create_session(
        self, db: AsyncSession, user_id: Optional[int], ctx: BaseContext
    ) -> CheckoutSession:
        """Create a subscription checkout session, linking the customer when known."""
        ...

    async def get_session_status(self, session_id: str) -> CheckoutSessionStatus:
        """Read-only passthrough of a session's state."""
        ...


@runtime_checkable
class SubscriptionSyncProtocol(Protocol):
    """Keeps user entitlements in line with Stripe subscription state."""

    async def process_webhook(
        self, db: AsyncSession, payload: bytes, signature: str
    ) -> WebhookOutcome:
        """Verify the signature, then process the event.

        Raises BillingConfigurationError if no secret is configured and
        WebhookSignatureError on a missing or bad signature. Processing errors are
        logged and reported in the outcome instead of raised.
        """
        ...

    async def process_event(self, db: AsyncSession, event: Any) -> WebhookOutcome:
        """Process an already-verified event."""
        ...

    async def refresh_from_provider(
        self, db: AsyncSession, user_id: int, ctx: BaseContext
    ) -> User:
        """Link the user's Stripe customer by email if needed and re-sync entitlement."""
        ...

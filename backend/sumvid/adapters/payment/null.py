"""Null payment gateway for when Stripe is disabled.

Satisfies PaymentGatewayProtocol so the container can always be fully
constructed.

Lookups return empty results, so webhook user resolution and subscription
refresh degrade to no-ops. Checkout operations raise BillingNotAvailableError:
they require a real payment provider and should fail clearly.

has_webhook_secret returns False, so the webhook endpoint answers with a
configuration error rather than pretending to verify anything.
"""

from typing import Any, Dict, Optional

from sumvid.core.protocols.payment import PaymentGatewayProtocol
from sumvid.domains.billing.exceptions import BillingNotAvailableError, WebhookSignatureError


class NullPaymentGateway(PaymentGatewayProtocol):
    """No-op payment gateway used when Stripe is disabled."""

    # ------------------------------------------------------------------
    # Lookups: return empty defaults
    # ------------------------------------------------------------------

    async def get_customer(self, customer_id: str) -> Optional[Any]:
        """Return None: no customers exist."""
        return None

    async def find_customers_by_email(self, email: str, limit: int = 10) -> list[Any]:
        """Return an empty list."""
        return []

    async def list_subscriptions(self, customer_id: str, limit: int = 10) -> list[Any]:
        """Return an empty list."""
        return []

    # ------------------------------------------------------------------
    # User-facing operations: raise
    # ------------------------------------------------------------------

    async def create_customer(
        self,
        email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Raise: customers cannot be created without a provider."""
        raise BillingNotAvailableError()

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Raise: checkout requires a provider."""
        raise BillingNotAvailableError()

    async def retrieve_checkout_session(self, session_id: str) -> Any:
        """Raise: no sessions exist."""
        raise BillingNotAvailableError()

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def has_webhook_secret(self) -> bool:
        """Return False: nothing can be verified."""
        return False

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Raise WebhookSignatureError: billing is disabled."""
        raise WebhookSignatureError("Billing is not enabled")

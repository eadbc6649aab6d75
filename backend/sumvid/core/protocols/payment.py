"""Payment gateway protocol.

Cross-cutting infrastructure protocol for payment processing (Stripe).
All methods must be implemented by the same provider; the protocol is not split.

Direct consumers: SubscriptionSync, CheckoutOrchestrator.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class PaymentGatewayProtocol(Protocol):
    """Protocol for payment gateway operations.

    Returned objects follow Stripe's shapes (attribute access plus ``.get``).
    Adapter failures surface as ExternalServiceError.
    """

    # -------------------------------------------------------------------------
    # Customer operations
    # -------------------------------------------------------------------------

    async def get_customer(self, customer_id: str) -> Optional[Any]:
        """Retrieve a customer. None if the provider has no such (live) customer."""
        ...

    async def find_customers_by_email(self, email: str, limit: int = 10) -> list[Any]:
        """List customers registered under an email, newest first."""
        ...

    async def create_customer(
        self,
        email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a customer in the payment provider."""
        ...

    # -------------------------------------------------------------------------
    # Subscription operations
    # -------------------------------------------------------------------------

    async def list_subscriptions(self, customer_id: str, limit: int = 10) -> list[Any]:
        """List a customer's subscriptions in any status."""
        ...

    # -------------------------------------------------------------------------
    # Checkout operations
    # -------------------------------------------------------------------------

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a subscription checkout session."""
        ...

    async def retrieve_checkout_session(self, session_id: str) -> Any:
        """Retrieve a checkout session."""
        ...

    # -------------------------------------------------------------------------
    # Webhook operations
    # -------------------------------------------------------------------------

    def has_webhook_secret(self) -> bool:
        """Whether a webhook signing secret is configured."""
        ...

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Verify and construct webhook event from payload and signature."""
        ...

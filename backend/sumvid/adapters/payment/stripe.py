"""Stripe payment gateway.

Uses the async methods of ``stripe.StripeClient`` over an httpx transport.
Transient failures (connection errors, rate limits) are retried with
exponential backoff by tenacity; every other Stripe error surfaces as
ExternalServiceError so the domain layer never sees SDK types.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import stripe
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from sumvid.core.config import settings
from sumvid.core.exceptions import ExternalServiceError
from sumvid.core.logging import logger
from sumvid.core.protocols.payment import PaymentGatewayProtocol
from sumvid.domains.billing.exceptions import WebhookSignatureError

T = TypeVar("T")

_RETRYABLE = (stripe.APIConnectionError, stripe.RateLimitError)

stripe_logger = logger.with_prefix("Stripe: ").with_context(component="stripe_gateway")


class StripePaymentGateway(PaymentGatewayProtocol):
    """PaymentGatewayProtocol backed by the Stripe API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        client: Optional[stripe.StripeClient] = None,
    ) -> None:
        """Build the client. Arguments default to the application settings."""
        api_key = api_key or settings.STRIPE_SECRET_KEY
        if client is None and not api_key:
            raise ValueError("STRIPE_SECRET_KEY is required when STRIPE_ENABLED is true")

        self._webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET
        self._max_attempts = max_attempts or settings.PAYMENT_GATEWAY_MAX_ATTEMPTS
        timeout = timeout_seconds or settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        self._client = client or stripe.StripeClient(
            api_key,
            http_client=stripe.HTTPXClient(timeout=timeout, allow_sync_methods=True),
            # tenacity owns retries
            max_network_retries=0,
        )

    async def _call(self, operation: str, fn: Callable[..., Awaitable[T]], **kwargs: Any) -> T:
        """Run one Stripe call with retry on transient errors."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
                retry=retry_if_exception_type(_RETRYABLE),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        stripe_logger.warning(
                            f"Retrying {operation} (attempt {attempt.retry_state.attempt_number})"
                        )
                    result = await fn(**kwargs)
            return result
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e)
            stripe_logger.error(f"{operation} failed: {message}")
            raise ExternalServiceError("Stripe", f"{operation} failed: {message}") from e

    # ---- Customer operations ----

    async def get_customer(self, customer_id: str) -> Optional[Any]:
        """Retrieve a customer. None if missing or deleted."""
        try:
            customer = await self._call(
                "customers.retrieve", self._client.customers.retrieve_async, customer=customer_id
            )
        except ExternalServiceError as e:
            cause = e.__cause__
            if isinstance(cause, stripe.InvalidRequestError) and cause.code == "resource_missing":
                return None
            raise
        if getattr(customer, "deleted", False):
            return None
        return customer

    async def find_customers_by_email(self, email: str, limit: int = 10) -> list[Any]:
        """List customers registered under an email, newest first."""
        result = await self._call(
            "customers.list",
            self._client.customers.list_async,
            params={"email": email, "limit": limit},
        )
        return list(result.data)

    async def create_customer(
        self,
        email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a customer. Stripe collects the email at checkout if omitted."""
        params: Dict[str, Any] = {"metadata": metadata or {}}
        if email:
            params["email"] = email
        return await self._call(
            "customers.create", self._client.customers.create_async, params=params
        )

    # ---- Subscription operations ----

    async def list_subscriptions(self, customer_id: str, limit: int = 10) -> list[Any]:
        """List a customer's subscriptions in any status."""
        result = await self._call(
            "subscriptions.list",
            self._client.subscriptions.list_async,
            params={"customer": customer_id, "status": "all", "limit": limit},
        )
        return list(result.data)

    # ---- Checkout operations ----

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a subscription-mode checkout session for one unit of the price."""
        metadata = metadata or {}
        params = {
            "customer": customer_id,
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "locale": "en",
            "metadata": metadata,
            "subscription_data": {"metadata": metadata},
            "allow_promotion_codes": True,
        }
        return await self._call(
            "checkout.sessions.create", self._client.checkout.sessions.create_async, params=params
        )

    async def retrieve_checkout_session(self, session_id: str) -> Any:
        """Retrieve a checkout session."""
        return await self._call(
            "checkout.sessions.retrieve",
            self._client.checkout.sessions.retrieve_async,
            session=session_id,
        )

    # ---- Webhook operations ----

    def has_webhook_secret(self) -> bool:
        """Whether STRIPE_WEBHOOK_SECRET is configured."""
        return bool(self._webhook_secret)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Verify the Stripe-Signature header and parse the event.

        Raises:
            WebhookSignatureError: If the signature or payload is invalid.
        """
        try:
            return self._client.construct_event(payload, signature, self._webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f"Invalid webhook signature: {e}") from e
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e

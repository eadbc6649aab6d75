"""Fake payment gateway for testing.

In-memory implementation of PaymentGatewayProtocol.
Records all calls for assertions. No external API calls.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional
from uuid import uuid4

from sumvid.core.protocols.payment import PaymentGatewayProtocol
from sumvid.domains.billing.exceptions import WebhookSignatureError

INVALID_SIGNATURE = "invalid"


class FakePaymentGateway(PaymentGatewayProtocol):
    """Test implementation of PaymentGatewayProtocol.

    Webhook payloads are plain JSON; any signature other than
    ``INVALID_SIGNATURE`` verifies.

    Usage::

        fake = FakePaymentGateway()
        customer = await fake.create_customer("a@b.com")
        assert fake.call_count("create_customer") == 1
    """

    def __init__(
        self,
        webhook_secret: Optional[str] = "whsec_test",
        should_raise: Optional[Exception] = None,
    ) -> None:
        """Initialize with an optional webhook secret and error injection."""
        self._webhook_secret = webhook_secret
        self._should_raise = should_raise
        self._calls: list[tuple[str, tuple, dict]] = []

        # In-memory state
        self._customers: dict[str, _obj] = {}
        self._subscriptions: dict[str, list[_obj]] = {}  # customer_id -> subscriptions
        self._sessions: dict[str, _obj] = {}

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self._calls.append((method, args, kwargs))
        if self._should_raise:
            raise self._should_raise

    # ---- Test helpers ----

    def call_count(self, method: str) -> int:
        """Number of times a method was called."""
        return sum(1 for name, _, _ in self._calls if name == method)

    def calls_for(self, method: str) -> list[tuple[tuple, dict]]:
        """Return (args, kwargs) for each call to *method*."""
        return [(a, k) for name, a, k in self._calls if name == method]

    def seed_customer(self, customer_id: str, email: Optional[str] = None) -> _obj:
        """Add a customer as if created earlier in Stripe."""
        obj = _obj(id=customer_id, email=email, metadata={}, deleted=False)
        self._customers[customer_id] = obj
        return obj

    def seed_subscription(self, customer_id: str, subscription_id: str, status: str) -> _obj:
        """Attach a subscription to a customer."""
        obj = _obj(id=subscription_id, customer=customer_id, status=status)
        self._subscriptions.setdefault(customer_id, []).append(obj)
        return obj

    def delete_customer(self, customer_id: str) -> None:
        """Mark a customer deleted upstream."""
        if customer_id in self._customers:
            self._customers[customer_id].deleted = True

    def clear(self) -> None:
        """Reset all recorded state."""
        self._calls.clear()
        self._customers.clear()
        self._subscriptions.clear()
        self._sessions.clear()

    # ---- Customer operations ----

    async def get_customer(self, customer_id: str) -> Optional[Any]:
        """Return the fake customer unless missing or deleted."""
        self._record("get_customer", customer_id)
        customer = self._customers.get(customer_id)
        if customer is None or customer.deleted:
            return None
        return customer

    async def find_customers_by_email(self, email: str, limit: int = 10) -> list[Any]:
        """Return live customers with this email, newest first."""
        self._record("find_customers_by_email", email, limit=limit)
        matches = [
            c
            for c in self._customers.values()
            if not c.deleted and c.email and c.email.lower() == email.lower()
        ]
        return list(reversed(matches))[:limit]

    async def create_customer(
        self,
        email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Create a fake customer in memory."""
        self._record("create_customer", email, metadata=metadata)
        cid = f"cus_{uuid4().hex[:14]}"
        obj = _obj(id=cid, email=email, metadata=metadata or {}, deleted=False)
        self._customers[cid] = obj
        return obj

    # ---- Subscription operations ----

    async def list_subscriptions(self, customer_id: str, limit: int = 10) -> list[Any]:
        """Return the customer's fake subscriptions."""
        self._record("list_subscriptions", customer_id, limit=limit)
        return list(self._subscriptions.get(customer_id, []))[:limit]

    # ---- Checkout operations ----

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Return a fake checkout session URL."""
        self._record(
            "create_checkout_session",
            customer_id,
            price_id,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )
        sid = f"cs_{uuid4().hex[:14]}"
        obj = _obj(
            id=sid,
            url=f"https://checkout.fake/{sid}",
            customer=customer_id,
            subscription=None,
            status="open",
            payment_status="unpaid",
            metadata=metadata or {},
        )
        self._sessions[sid] = obj
        return obj

    async def retrieve_checkout_session(self, session_id: str) -> Any:
        """Return a fake session, or a completed-looking one for unknown ids."""
        self._record("retrieve_checkout_session", session_id)
        if session_id in self._sessions:
            return self._sessions[session_id]
        return _obj(
            id=session_id,
            customer="cus_fake",
            subscription="sub_fake",
            status="complete",
            payment_status="paid",
        )

    # ---- Webhook operations ----

    def has_webhook_secret(self) -> bool:
        """Whether a fake secret is configured."""
        return bool(self._webhook_secret)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Parse a JSON payload into an event attribute-bag."""
        self._record("verify_webhook_signature", signature)
        if signature == INVALID_SIGNATURE:
            raise WebhookSignatureError()
        try:
            return _to_obj(json.loads(payload))
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e


class _obj:
    """Tiny attribute-bag to emulate Stripe object shapes in tests."""

    def __init__(self, **kwargs: Any):
        for k, v in kwargs.items():
            setattr(self, k, v)

    def get(self, key: str, default: Any = None) -> Any:
        """Get attribute by key with default."""
        return getattr(self, key, default)


def _to_obj(value: Any) -> Any:
    """Recursively turn parsed JSON objects into attribute-bags."""
    if isinstance(value, dict):
        return _obj(**{k: _to_obj(v) for k, v in value.items()})
    if isinstance(value, list):
        return [_to_obj(v) for v in value]
    return value

"""Checkout orchestration: Stripe customers and subscription checkout sessions."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.core.logging import ContextualLogger
from sumvid.core.protocols.payment import PaymentGatewayProtocol
from sumvid.domains.billing.exceptions import BillingConfigurationError, wrap_gateway_errors
from sumvid.domains.billing.protocols import CheckoutServiceProtocol
from sumvid.domains.billing.types import (
    CheckoutSession,
    CheckoutSessionStatus,
    stripe_field,
    stripe_object_id,
)
from sumvid.domains.users.repository import UserRepositoryProtocol
from sumvid.models.user import User


class CheckoutOrchestrator(CheckoutServiceProtocol):
    """Creates checkout sessions and keeps the user's Stripe customer link valid."""

    def __init__(
        self,
        payment_gateway: PaymentGatewayProtocol,
        user_repo: UserRepositoryProtocol,
        price_id: Optional[str],
        frontend_url: str,
    ) -> None:
        """Initialize with the gateway, the user repository and checkout settings."""
        self._payment_gateway = payment_gateway
        self._user_repo = user_repo
        self._price_id = price_id
        self._frontend_url = frontend_url.rstrip("/")

    @property
    def success_url(self) -> str:
        """Redirect target after payment; Stripe fills in the session id."""
        return f"{self._frontend_url}?checkout=success&session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        """Redirect target when the user abandons checkout."""
        return f"{self._frontend_url}?checkout=cancelled"

    @wrap_gateway_errors
    async def create_session(
        self, db: AsyncSession, user_id: Optional[int], ctx: BaseContext
    ) -> CheckoutSession:
        """Create a subscription checkout session.

        With a known user the session reuses (or repairs) their Stripe customer.
        Without one, an unlinked customer is created; webhook processing links
        it later by email.

        Raises:
            BillingConfigurationError: If STRIPE_PRICE_ID is not set.
        """
        if not self._price_id:
            raise BillingConfigurationError("STRIPE_PRICE_ID")

        log = ctx.logger
        user: Optional[User] = None
        if user_id is not None:
            user = await self._user_repo.get(db, user_id=user_id)
            if user is None:
                log.warning(f"Authenticated user {user_id} not found, checking out as guest")

        if user is not None:
            customer_id = await self._ensure_customer(db, user, log)
            metadata = {"user_id": str(user.id)}
        else:
            customer = await self._payment_gateway.create_customer(email=None, metadata={})
            customer_id = stripe_field(customer, "id")
            metadata = {}
            log.info(f"Created unlinked Stripe customer {customer_id} for guest checkout")

        session = await self._payment_gateway.create_checkout_session(
            customer_id=customer_id,
            price_id=self._price_id,
            success_url=self.success_url,
            cancel_url=self.cancel_url,
            metadata=metadata,
        )
        log.info(f"Created checkout session {stripe_field(session, 'id')}")
        return CheckoutSession(
            session_id=stripe_field(session, "id"), url=stripe_field(session, "url")
        )

    @wrap_gateway_errors
    async def get_session_status(self, session_id: str) -> CheckoutSessionStatus:
        """Read-only passthrough of a session's state."""
        session = await self._payment_gateway.retrieve_checkout_session(session_id)
        return CheckoutSessionStatus(
            status=stripe_field(session, "status"),
            customer=stripe_object_id(stripe_field(session, "customer")),
            subscription=stripe_object_id(stripe_field(session, "subscription")),
            payment_status=stripe_field(session, "payment_status"),
        )

    async def _ensure_customer(self, db: AsyncSession, user: User, log: ContextualLogger) -> str:
        """Return a live Stripe customer id for the user, persisting any new link."""
        log = log.with_context(user_id=str(user.id))
        stored = user.stripe_customer_id

        if stored:
            if await self._payment_gateway.get_customer(stored) is not None:
                await self._warn_on_duplicate(user, stored, log)
                return stored
            log.warning(f"Stored Stripe customer {stored} no longer exists, creating a new one")
        else:
            existing = await self._payment_gateway.find_customers_by_email(user.email, limit=1)
            if existing:
                # Created by an earlier guest checkout with the same email.
                return await self._persist_link(db, user, stripe_field(existing[0], "id"), log)

        customer = await self._payment_gateway.create_customer(
            email=user.email, metadata={"user_id": str(user.id)}
        )
        return await self._persist_link(db, user, stripe_field(customer, "id"), log)

    async def _persist_link(
        self, db: AsyncSession, user: User, customer_id: str, log: ContextualLogger
    ) -> str:
        linked = await self._user_repo.set_stripe_customer_id(
            db,
            user_id=user.id,
            stripe_customer_id=customer_id,
            expected_current=user.stripe_customer_id,
        )
        if linked is None:
            # A webhook linked the user meanwhile; keep its customer.
            current = await self._user_repo.get(db, user_id=user.id)
            if current is not None and current.stripe_customer_id:
                log.warning(
                    f"User was linked to {current.stripe_customer_id} concurrently, "
                    f"not overwriting with {customer_id}"
                )
                return current.stripe_customer_id
            return customer_id

        await db.commit()
        log.info(f"Linked Stripe customer {customer_id}")
        return customer_id

    async def _warn_on_duplicate(self, user: User, stored: str, log: ContextualLogger) -> None:
        customers = await self._payment_gateway.find_customers_by_email(user.email)
        others = [stripe_field(c, "id") for c in customers if stripe_field(c, "id") != stored]
        if others:
            log.warning(
                f"Stripe has other customers for this email ({', '.join(others)}) besides "
                f"linked customer {stored}; leaving link unchanged"
            )

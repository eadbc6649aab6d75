"""Webhook processor for Stripe subscription events.

Transitions are keyed on the status carried by the event payload, never on the
user's previous state, so related events converge to the same final state in
whatever order Stripe delivers them. Duplicate deliveries are suppressed by the
processed-event ledger.
"""

from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.core.logging import ContextualLogger, logger
from sumvid.core.protocols.payment import PaymentGatewayProtocol
from sumvid.core.shared_models import AuthMethod
from sumvid.domains.billing.exceptions import (
    BillingConfigurationError,
    WebhookSignatureError,
    wrap_gateway_errors,
)
from sumvid.domains.billing.ledger import ProcessedEventLedgerProtocol
from sumvid.domains.billing.protocols import SubscriptionSyncProtocol
from sumvid.domains.billing.types import (
    ACTIVE_PROVIDER_STATUSES,
    EntitlementResolver,
    SubscriptionStatus,
    WebhookOutcome,
    WebhookOutcomeStatus,
    stripe_field,
    stripe_object_id,
)
from sumvid.domains.users.exceptions import UserNotFoundError
from sumvid.domains.users.repository import UserRepositoryProtocol
from sumvid.models.user import User


def _invoice_subscription_id(invoice: Any) -> Optional[str]:
    """Subscription id of an invoice, across Stripe API versions."""
    subscription = stripe_object_id(stripe_field(invoice, "subscription"))
    if subscription:
        return subscription
    # Newer API versions nest it under parent.subscription_details.
    details = stripe_field(stripe_field(invoice, "parent"), "subscription_details")
    return stripe_object_id(stripe_field(details, "subscription"))


class SubscriptionSync(SubscriptionSyncProtocol):
    """Process Stripe webhook events into user entitlement changes."""

    def __init__(
        self,
        payment_gateway: PaymentGatewayProtocol,
        user_repo: UserRepositoryProtocol,
        ledger: ProcessedEventLedgerProtocol,
        resolver: EntitlementResolver,
        event_retention: int = 1000,
    ) -> None:
        """Initialize with all required dependencies."""
        self._payment_gateway = payment_gateway
        self._user_repo = user_repo
        self._ledger = ledger
        self._resolver = resolver
        self._event_retention = event_retention

        # Event handler mapping
        self.handlers = {
            "customer.subscription.created": self._handle_subscription_upsert,
            "customer.subscription.updated": self._handle_subscription_upsert,
            "customer.subscription.deleted": self._handle_subscription_deleted,
            "invoice.payment_succeeded": self._handle_payment_succeeded,
            "invoice.payment_failed": self._handle_payment_failed,
            "customer.created": self._handle_customer_event,
            "customer.updated": self._handle_customer_event,
        }

    async def process_webhook(
        self, db: AsyncSession, payload: bytes, signature: str
    ) -> WebhookOutcome:
        """Verify webhook signature and process the resulting event.

        Raises:
            BillingConfigurationError: If no webhook secret is configured.
            WebhookSignatureError: If the signature is missing or does not verify.
        """
        if not self._payment_gateway.has_webhook_secret():
            raise BillingConfigurationError("STRIPE_WEBHOOK_SECRET")
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")
        event = self._payment_gateway.verify_webhook_signature(payload, signature)
        return await self.process_event(db, event)

    async def process_event(self, db: AsyncSession, event: Any) -> WebhookOutcome:
        """Process a verified Stripe webhook event.

        The entitlement change and the ledger record commit together. Any
        failure rolls both back and is reported as a FAILED outcome rather than
        raised, so the caller can still acknowledge the delivery.
        """
        event_id = stripe_field(event, "id")
        event_type = stripe_field(event, "type")
        log = logger.with_context(
            auth_method=AuthMethod.STRIPE_WEBHOOK.value,
            event_type=event_type,
            stripe_event_id=event_id,
        )

        try:
            if await self._ledger.has_processed(db, event_id=event_id):
                log.info("Duplicate webhook event, skipping")
                return WebhookOutcome(event_id, event_type, WebhookOutcomeStatus.DUPLICATE)

            handler = self.handlers.get(event_type)
            if handler:
                log.info(f"Processing webhook event: {event_type}")
                status = await handler(db, event, log)
            else:
                log.info(f"Unhandled webhook event type: {event_type}")
                status = WebhookOutcomeStatus.IGNORED

            if not await self._ledger.record(db, event_id=event_id, event_type=event_type):
                # A concurrent delivery of the same event committed first.
                await db.rollback()
                log.info("Event recorded by a concurrent delivery, discarding changes")
                return WebhookOutcome(event_id, event_type, WebhookOutcomeStatus.DUPLICATE)
            await db.commit()
        except Exception as e:
            await db.rollback()
            log.error(f"Error handling {event_type}: {e}", exc_info=True)
            return WebhookOutcome(event_id, event_type, WebhookOutcomeStatus.FAILED, error=str(e))

        await self._prune_ledger(db, log)
        return WebhookOutcome(event_id, event_type, status)

    @wrap_gateway_errors
    async def refresh_from_provider(
        self, db: AsyncSession, user_id: int, ctx: BaseContext
    ) -> User:
        """Link the user's Stripe customer by email if needed and re-sync entitlement.

        Covers users who paid before their account was linked and whose
        webhooks were dropped as unresolvable. Premium is revoked only when no
        Stripe customer with the user's email has an active subscription.
        """
        log = ctx.logger.with_context(component="subscription_refresh")
        user = await self._user_repo.get(db, user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        customer_id = user.stripe_customer_id
        if not customer_id:
            customers = await self._payment_gateway.find_customers_by_email(user.email, limit=1)
            if not customers:
                log.info("No Stripe customer for user email")
                return user
            customer_id = stripe_field(customers[0], "id")
            user = await self._link_customer(db, user, customer_id, log)

        active = await self._active_subscription(customer_id)
        if active is None:
            active = await self._active_subscription_by_email(user, customer_id, log)
        if active is not None:
            user = await self._apply(
                db, user, SubscriptionStatus.PREMIUM, stripe_field(active, "id"), log
            )
        else:
            user = await self._apply(db, user, SubscriptionStatus.FREEMIUM, None, log)
        await db.commit()
        return user

    # Event handlers

    async def _handle_subscription_upsert(
        self, db: AsyncSession, event: Any, log: ContextualLogger
    ) -> WebhookOutcomeStatus:
        """Handle subscription created/updated by the payload's own status."""
        subscription = event.data.object
        provider_status = stripe_field(subscription, "status")
        target = self._resolver.status_for_provider(provider_status)
        if target is None:
            log.info(f"Subscription status {provider_status!r} does not change entitlement")
            return WebhookOutcomeStatus.IGNORED

        customer_id = stripe_object_id(stripe_field(subscription, "customer"))
        user = await self._resolve_user(db, customer_id, log)
        if user is None:
            return WebhookOutcomeStatus.UNRESOLVED

        await self._apply(db, user, target, stripe_field(subscription, "id"), log)
        return WebhookOutcomeStatus.PROCESSED

    async def _handle_subscription_deleted(
        self, db: AsyncSession, event: Any, log: ContextualLogger
    ) -> WebhookOutcomeStatus:
        """Handle subscription deletion: back to Freemium."""
        subscription = event.data.object
        customer_id = stripe_object_id(stripe_field(subscription, "customer"))
        user = await self._resolve_user(db, customer_id, log)
        if user is None:
            return WebhookOutcomeStatus.UNRESOLVED

        await self._apply(db, user, SubscriptionStatus.FREEMIUM, None, log)
        return WebhookOutcomeStatus.PROCESSED

    async def _handle_payment_succeeded(
        self, db: AsyncSession, event: Any, log: ContextualLogger
    ) -> WebhookOutcomeStatus:
        """Re-assert Premium for a paid subscription invoice."""
        invoice = event.data.object
        subscription_id = _invoice_subscription_id(invoice)
        if not subscription_id:
            log.info("Invoice without subscription, nothing to confirm")
            return WebhookOutcomeStatus.IGNORED

        customer_id = stripe_object_id(stripe_field(invoice, "customer"))
        user = await self._resolve_user(db, customer_id, log)
        if user is None:
            return WebhookOutcomeStatus.UNRESOLVED

        await self._apply(db, user, SubscriptionStatus.PREMIUM, subscription_id, log)
        return WebhookOutcomeStatus.PROCESSED

    async def _handle_payment_failed(
        self, db: AsyncSession, event: Any, log: ContextualLogger
    ) -> WebhookOutcomeStatus:
        """Log only. Stripe retries; downgrades arrive as subscription updates."""
        invoice = event.data.object
        log.warning(
            f"Payment failed for customer {stripe_object_id(stripe_field(invoice, 'customer'))}, "
            f"attempt {stripe_field(invoice, 'attempt_count')}"
        )
        return WebhookOutcomeStatus.IGNORED

    async def _handle_customer_event(
        self, db: AsyncSession, event: Any, log: ContextualLogger
    ) -> WebhookOutcomeStatus:
        """Log customer lifecycle events. Linking happens on subscription events."""
        customer = event.data.object
        log.info(f"Customer event for {stripe_field(customer, 'id')}")
        return WebhookOutcomeStatus.IGNORED

    # Helpers

    async def _resolve_user(
        self, db: AsyncSession, customer_id: Optional[str], log: ContextualLogger
    ) -> Optional[User]:
        """Find the user for a Stripe customer, linking by email if needed."""
        if not customer_id:
            log.warning("Event carries no customer id")
            return None

        user = await self._user_repo.get_by_stripe_customer_id(
            db, stripe_customer_id=customer_id
        )
        if user is not None:
            return user

        customer = await self._payment_gateway.get_customer(customer_id)
        email = stripe_field(customer, "email")
        if not email:
            log.warning(f"Customer {customer_id} is not linked and has no email, dropping event")
            return None

        user = await self._user_repo.get_by_email(db, email=email)
        if user is None:
            log.warning(f"No user matches the email of customer {customer_id}, dropping event")
            return None

        return await self._link_customer(db, user, customer_id, log)

    async def _link_customer(
        self, db: AsyncSession, user: User, customer_id: str, log: ContextualLogger
    ) -> User:
        """Persist the customer link unless the user is linked to another customer."""
        log = log.with_context(user_id=str(user.id))
        if user.stripe_customer_id and user.stripe_customer_id != customer_id:
            log.warning(
                f"User already linked to customer {user.stripe_customer_id}, not relinking to "
                f"{customer_id}; possible duplicate Stripe customer"
            )
            return user

        linked = await self._user_repo.set_stripe_customer_id(
            db, user_id=user.id, stripe_customer_id=customer_id, expected_current=None
        )
        if linked is None:
            # Linked concurrently; use whatever won.
            refreshed = await self._user_repo.get(db, user_id=user.id)
            return refreshed or user

        log.info(f"Linked Stripe customer {customer_id} by email")
        return linked

    async def _active_subscription(self, customer_id: str) -> Optional[Any]:
        """First active or trialing subscription of a customer, if any."""
        subscriptions = await self._payment_gateway.list_subscriptions(customer_id)
        return next(
            (s for s in subscriptions if stripe_field(s, "status") in ACTIVE_PROVIDER_STATUSES),
            None,
        )

    async def _active_subscription_by_email(
        self, user: User, linked_customer_id: str, log: ContextualLogger
    ) -> Optional[Any]:
        """Active subscription held by another Stripe customer with the user's email.

        The link is left alone; the duplicate customer is only reported.
        """
        for customer in await self._payment_gateway.find_customers_by_email(user.email):
            customer_id = stripe_field(customer, "id")
            if customer_id == linked_customer_id:
                continue
            active = await self._active_subscription(customer_id)
            if active is not None:
                log.warning(
                    f"Active subscription {stripe_field(active, 'id')} belongs to customer "
                    f"{customer_id}, not the linked {linked_customer_id}; possible duplicate "
                    "Stripe customer, keeping Premium"
                )
                return active
        return None

    async def _apply(
        self,
        db: AsyncSession,
        user: User,
        status: SubscriptionStatus,
        subscription_id: Optional[str],
        log: ContextualLogger,
    ) -> User:
        entitlement = self._resolver.resolve(status)
        updated = await self._user_repo.set_entitlement(
            db,
            user_id=user.id,
            subscription_status=entitlement.status.value,
            usage_limit=entitlement.usage_limit,
            stripe_subscription_id=subscription_id if entitlement.keeps_subscription_id else None,
        )
        log.with_context(user_id=str(user.id)).info(
            f"Entitlement set to {entitlement.status.value} (limit {entitlement.usage_limit})"
        )
        return updated or user

    async def _prune_ledger(self, db: AsyncSession, log: ContextualLogger) -> None:
        """Best-effort eviction of old event ids."""
        try:
            removed = await self._ledger.prune(db, keep=self._event_retention)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            log.warning(f"Failed to prune processed webhook events: {e}")
            return
        if removed:
            log.debug(f"Pruned {removed} processed webhook events")

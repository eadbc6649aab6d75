"""Stripe webhook endpoint.

Every verified event is acknowledged with 200, including duplicates and
events whose processing failed; only an unusable request is rejected.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid import schemas
from sumvid.api import deps
from sumvid.api.deps import Inject
from sumvid.domains.billing.protocols import SubscriptionSyncProtocol

router = APIRouter()


@router.post("/stripe", response_model=schemas.WebhookAck, include_in_schema=False)
@router.post("/provider", response_model=schemas.WebhookAck, include_in_schema=False)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: AsyncSession = Depends(deps.get_db),
    subscription_sync: SubscriptionSyncProtocol = Inject(SubscriptionSyncProtocol),
) -> schemas.WebhookAck:
    """Handle Stripe webhook events.

    Args:
        request: Raw HTTP request; the body is verified byte-for-byte
        stripe_signature: Stripe-Signature header
        db: Database session
        subscription_sync: Webhook processor (signature verification + processing)

    Returns:
        200 ``{received: true}`` for every verified event, 400 on a missing or
        invalid signature, 500 if the webhook secret is not configured
    """
    payload = await request.body()
    outcome = await subscription_sync.process_webhook(db, payload, stripe_signature or "")
    return schemas.WebhookAck(received=True, message=outcome.message, error=outcome.error)

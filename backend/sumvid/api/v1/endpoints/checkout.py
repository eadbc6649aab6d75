"""API endpoints for Stripe checkout.

Session creation accepts guests; the Stripe customer created for a guest is
linked to a user later, when their first subscription webhook arrives.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid import schemas
from sumvid.api import deps
from sumvid.api.context import ApiContext
from sumvid.api.deps import Inject
from sumvid.core.exceptions import BadRequestError
from sumvid.domains.billing.protocols import CheckoutServiceProtocol

router = APIRouter()


@router.post("/create-session", response_model=schemas.CheckoutSessionResponse)
async def create_session(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_optional_context),
    checkout: CheckoutServiceProtocol = Inject(CheckoutServiceProtocol),
) -> schemas.CheckoutSessionResponse:
    """Create a subscription checkout session.

    Args:
        db: Database session
        ctx: Request context; ``user_id`` is None for guests
        checkout: Checkout orchestrator

    Returns:
        Session id and hosted checkout URL
    """
    session = await checkout.create_session(db, ctx.user_id, ctx)
    return schemas.CheckoutSessionResponse(session_id=session.session_id, url=session.url)


@router.get("/session-status", response_model=schemas.CheckoutSessionStatusResponse)
async def session_status(
    session_id: Optional[str] = Query(None),
    checkout: CheckoutServiceProtocol = Inject(CheckoutServiceProtocol),
) -> schemas.CheckoutSessionStatusResponse:
    """Read-only view of a checkout session."""
    if not session_id:
        raise BadRequestError("Session ID is required")
    result = await checkout.get_session_status(session_id)
    return schemas.CheckoutSessionStatusResponse(
        status=result.status,
        customer=result.customer,
        subscription=result.subscription,
        payment_status=result.payment_status,
    )

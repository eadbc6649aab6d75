"""API endpoints for the current user's profile and daily usage."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid import schemas
from sumvid.api import deps
from sumvid.api.auth import issue_token
from sumvid.api.context import ApiContext
from sumvid.api.deps import Inject
from sumvid.domains.billing.protocols import SubscriptionSyncProtocol
from sumvid.domains.usage.protocols import QuotaServiceProtocol
from sumvid.domains.usage.types import UsageSnapshot
from sumvid.domains.users.exceptions import UserNotFoundError
from sumvid.domains.users.protocols import UserServiceProtocol
from sumvid.domains.users.repository import UserRepositoryProtocol

router = APIRouter()


@router.post(
    "/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    request: schemas.RegisterRequest,
    db: AsyncSession = Depends(deps.get_db),
    users: UserServiceProtocol = Inject(UserServiceProtocol),
) -> schemas.RegisterResponse:
    """Register a Freemium user and return a bearer token for them."""
    user = await users.register(db, email=request.email, name=request.name)
    return schemas.RegisterResponse(
        token=issue_token(user.id),
        user=schemas.UserProfile.model_validate(user),
        usage=schemas.UsageResponse.from_snapshot(UsageSnapshot.from_user(user)),
    )


@router.get("/usage", response_model=schemas.UsageResponse)
async def get_usage(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    quota: QuotaServiceProtocol = Inject(QuotaServiceProtocol),
) -> schemas.UsageResponse:
    """Return today's counters, applying any due reset first."""
    usage = await quota.get_usage(db, ctx.user_id, ctx)
    return schemas.UsageResponse.from_snapshot(usage)


@router.post("/increment-usage", response_model=schemas.IncrementUsageResponse)
async def increment_usage(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    quota: QuotaServiceProtocol = Inject(QuotaServiceProtocol),
):
    """Consume one unit of today's quota.

    Returns 400 with the current counters when the limit is reached.
    """
    result = await quota.increment_if_allowed(db, ctx.user_id, ctx)
    usage = schemas.UsageResponse.from_snapshot(result.usage)
    if not result.allowed:
        body = schemas.IncrementUsageResponse(
            success=False, error="Daily usage limit reached", usage=usage
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(by_alias=True)
        )
    return schemas.IncrementUsageResponse(success=True, usage=usage)


@router.get("/profile", response_model=schemas.UserProfile)
async def get_profile(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    quota: QuotaServiceProtocol = Inject(QuotaServiceProtocol),
    user_repo: UserRepositoryProtocol = Inject(UserRepositoryProtocol),
) -> schemas.UserProfile:
    """Return the current user's profile with today's usage applied."""
    await quota.reset_if_needed(db, ctx.user_id, ctx)
    user = await user_repo.get(db, user_id=ctx.user_id)
    if user is None:
        raise UserNotFoundError(ctx.user_id)
    return schemas.UserProfile.model_validate(user)


@router.post("/refresh-subscription", response_model=schemas.UserProfile)
async def refresh_subscription(
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    subscription_sync: SubscriptionSyncProtocol = Inject(SubscriptionSyncProtocol),
) -> schemas.UserProfile:
    """Re-link the Stripe customer by email and re-sync the plan from Stripe."""
    user = await subscription_sync.refresh_from_provider(db, ctx.user_id, ctx)
    return schemas.UserProfile.model_validate(user)

"""Usage schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sumvid.domains.usage.types import UsageSnapshot


class UsageResponse(BaseModel):
    """Daily usage counters of the current user."""

    used: int
    limit: int
    subscription_status: str = Field(alias="subscriptionStatus")
    remaining: int

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_snapshot(cls, usage: UsageSnapshot) -> "UsageResponse":
        """Build the response from a domain snapshot."""
        return cls(
            used=usage.used,
            limit=usage.limit,
            subscription_status=usage.subscription_status,
            remaining=usage.remaining,
        )


class IncrementUsageResponse(BaseModel):
    """Result of POST /user/increment-usage."""

    success: bool
    usage: UsageResponse
    error: Optional[str] = None

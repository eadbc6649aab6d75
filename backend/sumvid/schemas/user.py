"""User schemas."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from sumvid.schemas.usage import UsageResponse


class RegisterRequest(BaseModel):
    """Schema for registering a user."""

    email: EmailStr
    name: Optional[str] = None


class UserProfile(BaseModel):
    """Profile of the current user with today's usage applied."""

    id: int
    email: str
    name: Optional[str] = None
    subscription_status: str = Field(alias="subscriptionStatus")
    usage_count: int = Field(alias="usageCount")
    usage_limit: int = Field(alias="usageLimit")
    last_reset_date: Optional[date] = Field(default=None, alias="lastResetDate")
    stripe_customer_id: Optional[str] = Field(default=None, alias="stripeCustomerId")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RegisterResponse(BaseModel):
    """Bearer token and profile of a newly registered user."""

    token: str
    user: UserProfile
    usage: UsageResponse

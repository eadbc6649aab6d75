"""Checkout schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutSessionResponse(BaseModel):
    """Hosted checkout session to redirect the browser to."""

    session_id: str = Field(alias="sessionId")
    url: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CheckoutSessionStatusResponse(BaseModel):
    """Status of a checkout session as reported by Stripe."""

    status: Optional[str] = None
    customer: Optional[str] = None
    subscription: Optional[str] = None
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")

    model_config = ConfigDict(populate_by_name=True)

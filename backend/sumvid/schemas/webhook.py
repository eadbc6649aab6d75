"""Webhook acknowledgement schema."""

from typing import Optional

from pydantic import BaseModel


class WebhookAck(BaseModel):
    """Body returned to Stripe for every verified event."""

    received: bool = True
    message: Optional[str] = None
    error: Optional[str] = None

"""Processed webhook event model."""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sumvid.models._base import Base


class ProcessedWebhookEvent(Base):
    """A Stripe event id that has already been applied.

    The primary key is the uniqueness constraint that makes webhook
    processing idempotent across instances.
    """

    __tablename__ = "processed_webhook_event"

    event_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False)
    seen_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), index=True
    )

"""Models for the SumVid backend."""

from sumvid.models._base import Base
from sumvid.models.processed_webhook_event import ProcessedWebhookEvent
from sumvid.models.user import User

__all__ = ["Base", "ProcessedWebhookEvent", "User"]

"""User domain test helpers."""

from datetime import date, datetime, timezone
from typing import Any

from sumvid.domains.billing.types import BASE_LIMIT
from sumvid.models.user import User


def _make_user(user_id: int = 1, **overrides: Any) -> User:
    """Return a User ORM model with Freemium defaults."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    defaults = dict(
        id=user_id,
        email=f"user{user_id}@example.com",
        name=None,
        usage_count=0,
        usage_limit=BASE_LIMIT,
        last_reset_date=None,
        subscription_status="freemium",
        stripe_customer_id=None,
        stripe_subscription_id=None,
        created_at=now,
        modified_at=now,
    )
    defaults.update(overrides)
    return User(**defaults)


TODAY = date(2026, 3, 14)
YESTERDAY = date(2026, 3, 13)

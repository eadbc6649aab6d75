"""Fake user repository for testing.

Conditional methods check and mutate without awaiting in between, which gives
them the same all-or-nothing behavior as the single-statement UPDATEs of the
real repository. Each one yields to the event loop first so concurrent callers
actually interleave.
"""

import asyncio
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.domains.users.repository import normalize_email
from sumvid.models.user import User


class FakeUserRepository:
    """In-memory fake for UserRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty in-memory stores."""
        self._store: dict[int, User] = {}
        self._next_id = 1
        self._calls: list[tuple] = []

    def seed(self, user: User) -> User:
        """Insert a user directly, assigning an id if missing."""
        if user.id is None:
            user.id = self._next_id
        self._next_id = max(self._next_id, user.id + 1)
        self._store[user.id] = user
        return user

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    def snapshot(self, user_id: int) -> Optional[User]:
        """Direct access to a stored row, bypassing call recording."""
        return self._store.get(user_id)

    async def get(self, db: AsyncSession, *, user_id: int) -> Optional[User]:
        """Get a user by id."""
        self._calls.append(("get", user_id))
        return self._store.get(user_id)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively."""
        self._calls.append(("get_by_email", email))
        wanted = normalize_email(email)
        for user in self._store.values():
            if normalize_email(user.email) == wanted:
                return user
        return None

    async def get_by_stripe_customer_id(
        self, db: AsyncSession, *, stripe_customer_id: str
    ) -> Optional[User]:
        """Get the user linked to a Stripe customer."""
        self._calls.append(("get_by_stripe_customer_id", stripe_customer_id))
        for user in self._store.values():
            if user.stripe_customer_id == stripe_customer_id:
                return user
        return None

    async def create(
        self,
        db: AsyncSession,
        *,
        email: str,
        usage_limit: int,
        subscription_status: str,
        name: Optional[str] = None,
    ) -> User:
        """Create a user (fake)."""
        self._calls.append(("create", email))
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        user = User(
            email=normalize_email(email),
            name=name,
            usage_count=0,
            usage_limit=usage_limit,
            last_reset_date=None,
            subscription_status=subscription_status,
            stripe_customer_id=None,
            stripe_subscription_id=None,
            created_at=now,
            modified_at=now,
        )
        return self.seed(user)

    async def reset_if_stale(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if last_reset_date is NULL or before today."""
        self._calls.append(("reset_if_stale", user_id, today))
        await asyncio.sleep(0)
        user = self._store.get(user_id)
        if user is None or (user.last_reset_date is not None and user.last_reset_date >= today):
            return None
        user.usage_count = 0
        user.last_reset_date = today
        return user

    async def reset_if_over_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if it was reset today yet exceeds the limit."""
        self._calls.append(("reset_if_over_limit", user_id, today))
        await asyncio.sleep(0)
        user = self._store.get(user_id)
        if user is None or user.last_reset_date != today or user.usage_count <= user.usage_limit:
            return None
        user.usage_count = 0
        return user

    async def increment_if_below_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Add one to usage_count if below usage_limit and reset today."""
        self._calls.append(("increment_if_below_limit", user_id, today))
        await asyncio.sleep(0)
        user = self._store.get(user_id)
        if user is None or user.last_reset_date != today or user.usage_count >= user.usage_limit:
            return None
        user.usage_count += 1
        return user

    async def set_entitlement(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        subscription_status: str,
        usage_limit: int,
        stripe_subscription_id: Optional[str],
    ) -> Optional[User]:
        """Write the entitlement columns."""
        self._calls.append(
            ("set_entitlement", user_id, subscription_status, usage_limit, stripe_subscription_id)
        )
        user = self._store.get(user_id)
        if user is None:
            return None
        user.subscription_status = subscription_status
        user.usage_limit = usage_limit
        user.stripe_subscription_id = stripe_subscription_id
        return user

    async def set_stripe_customer_id(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        stripe_customer_id: Optional[str],
        expected_current: Optional[str] = None,
    ) -> Optional[User]:
        """Compare-and-set the Stripe customer link."""
        self._calls.append(("set_stripe_customer_id", user_id, stripe_customer_id))
        user = self._store.get(user_id)
        if user is None or user.stripe_customer_id != expected_current:
            return None
        user.stripe_customer_id = stripe_customer_id
        return user

"""User repository.

All mutations are targeted column UPDATEs. The conditional ones push the
precondition into the WHERE clause and use RETURNING, so the check and the
write are one statement and concurrent callers cannot both pass the check.
A ``None`` result from a conditional method means "no row matched": the user
is missing or the precondition no longer holds. Callers re-read to tell which.

Nothing here commits; the calling service owns the transaction.
"""

from datetime import date
from typing import Optional, Protocol, runtime_checkable

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.models.user import User


def normalize_email(email: str) -> str:
    """Canonical form used for storage and comparison."""
    return email.strip().lower()


@runtime_checkable
class UserRepositoryProtocol(Protocol):
    """Data access for user rows."""

    async def get(self, db: AsyncSession, *, user_id: int) -> Optional[User]:
        """Get a user by id."""
        ...

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively."""
        ...

    async def get_by_stripe_customer_id(
        self, db: AsyncSession, *, stripe_customer_id: str
    ) -> Optional[User]:
        """Get the user linked to a Stripe customer."""
        ...

    async def create(
        self,
        db: AsyncSession,
        *,
        email: str,
        usage_limit: int,
        subscription_status: str,
        name: Optional[str] = None,
    ) -> User:
        """Insert a new user row."""
        ...

    async def reset_if_stale(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if last_reset_date is NULL or before today."""
        ...

    async def reset_if_over_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if it was reset today yet exceeds the limit."""
        ...

    async def increment_if_below_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Add one to usage_count if below usage_limit and reset today."""
        ...

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
        ...

    async def set_stripe_customer_id(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        stripe_customer_id: Optional[str],
        expected_current: Optional[str] = None,
    ) -> Optional[User]:
        """Compare-and-set the Stripe customer link."""
        ...


class UserRepository(UserRepositoryProtocol):
    """SQLAlchemy implementation of UserRepositoryProtocol."""

    async def get(self, db: AsyncSession, *, user_id: int) -> Optional[User]:
        """Get a user by id."""
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get a user by email, case-insensitively."""
        result = await db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def get_by_stripe_customer_id(
        self, db: AsyncSession, *, stripe_customer_id: str
    ) -> Optional[User]:
        """Get the user linked to a Stripe customer."""
        result = await db.execute(select(User).where(User.stripe_customer_id == stripe_customer_id))
        return result.scalars().first()

    async def create(
        self,
        db: AsyncSession,
        *,
        email: str,
        usage_limit: int,
        subscription_status: str,
        name: Optional[str] = None,
    ) -> User:
        """Insert a new user row and flush to obtain its id."""
        user = User(
            email=normalize_email(email),
            name=name,
            usage_count=0,
            usage_limit=usage_limit,
            subscription_status=subscription_status,
        )
        db.add(user)
        await db.flush()
        return user

    async def reset_if_stale(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if last_reset_date is NULL or before today."""
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                or_(User.last_reset_date.is_(None), User.last_reset_date < today),
            )
            .values(usage_count=0, last_reset_date=today)
            .returning(User)
        )
        return await self._execute_returning(db, stmt)

    async def reset_if_over_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Zero the counter if it was reset today yet exceeds the limit."""
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.last_reset_date == today,
                User.usage_count > User.usage_limit,
            )
            .values(usage_count=0)
            .returning(User)
        )
        return await self._execute_returning(db, stmt)

    async def increment_if_below_limit(
        self, db: AsyncSession, *, user_id: int, today: date
    ) -> Optional[User]:
        """Add one to usage_count if below usage_limit and reset today."""
        stmt = build_increment_statement(user_id=user_id, today=today)
        return await self._execute_returning(db, stmt)

    async def set_entitlement(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        subscription_status: str,
        usage_limit: int,
        stripe_subscription_id: Optional[str],
    ) -> Optional[User]:
        """Write the entitlement columns. Usage columns are left alone."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                subscription_status=subscription_status,
                usage_limit=usage_limit,
                stripe_subscription_id=stripe_subscription_id,
            )
            .returning(User)
        )
        return await self._execute_returning(db, stmt)

    async def set_stripe_customer_id(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        stripe_customer_id: Optional[str],
        expected_current: Optional[str] = None,
    ) -> Optional[User]:
        """Set stripe_customer_id only if it still equals ``expected_current``.

        With the default ``expected_current=None`` this links an unlinked user
        and is a no-op for a user that is already linked.
        """
        stmt = (
            update(User)
            .where(
                and_(
                    User.id == user_id,
                    User.stripe_customer_id.is_not_distinct_from(expected_current),
                )
            )
            .values(stripe_customer_id=stripe_customer_id)
            .returning(User)
        )
        return await self._execute_returning(db, stmt)

    @staticmethod
    async def _execute_returning(db: AsyncSession, stmt) -> Optional[User]:
        # populate_existing refreshes any instance already in the identity map
        result = await db.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()


def build_increment_statement(*, user_id: int, today: date):
    """The single-statement conditional increment.

    ``UPDATE users SET usage_count = usage_count + 1
    WHERE id = :id AND usage_count < usage_limit AND last_reset_date = :today
    RETURNING ...``
    """
    return (
        update(User)
        .where(
            User.id == user_id,
            User.usage_count < User.usage_limit,
            User.last_reset_date == today,
        )
        .values(usage_count=User.usage_count + 1)
        .returning(User)
    )

"""Quota service: daily reset and atomic increment of a user's usage counter."""

from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.core.logging import ContextualLogger, logger
from sumvid.domains.users.exceptions import UserNotFoundError
from sumvid.domains.users.repository import UserRepositoryProtocol
from sumvid.domains.usage.protocols import QuotaServiceProtocol
from sumvid.domains.usage.types import IncrementResult, UsageSnapshot
from sumvid.models.user import User


def utc_today() -> date:
    """Current UTC calendar date."""
    return datetime.now(timezone.utc).date()


class QuotaService(QuotaServiceProtocol):
    """Per-user daily quota.

    Every mutation is a single conditional UPDATE in the repository, committed
    immediately. Two requests racing on the same user therefore cannot both
    observe a reset, and cannot jointly push usage_count past usage_limit.
    """

    def __init__(
        self,
        user_repo: UserRepositoryProtocol,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize with the user repository and a UTC clock."""
        self._user_repo = user_repo
        self._today = today

    async def get_usage(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> UsageSnapshot:
        """Apply any due reset, then return the counters."""
        user, _ = await self._refresh(db, user_id, self._log(ctx, user_id))
        return UsageSnapshot.from_user(user)

    async def reset_if_needed(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> bool:
        """Reset the counter if the UTC day changed.

        Returns True only for the caller whose UPDATE actually matched; a
        second call on the same day is a no-op that returns False.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        _, reset = await self._refresh(db, user_id, self._log(ctx, user_id))
        return reset

    async def increment_if_allowed(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> IncrementResult:
        """Consume one unit of quota if any is left.

        Returns an IncrementResult whose ``allowed`` is False when the limit was
        reached; call ``raise_for_limit()`` on it to turn that into an error.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        log = self._log(ctx, user_id)
        await self._refresh(db, user_id, log)

        current: Optional[User] = None
        for attempt in range(2):
            updated = await self._user_repo.increment_if_below_limit(
                db, user_id=user_id, today=self._today()
            )
            if updated is not None:
                await db.commit()
                return IncrementResult(allowed=True, usage=UsageSnapshot.from_user(updated))

            current = await self._user_repo.get(db, user_id=user_id)
            if current is None:
                raise UserNotFoundError(user_id)
            if attempt == 0 and current.last_reset_date != self._today():
                # The UTC day rolled over between the reset and the increment.
                log.info("Day changed during increment, resetting and retrying once")
                await self._refresh(db, user_id, log)
                continue
            break

        log.info(f"Usage limit reached ({current.usage_count}/{current.usage_limit})")
        return IncrementResult(allowed=False, usage=UsageSnapshot.from_user(current))

    async def _refresh(
        self, db: AsyncSession, user_id: int, log: ContextualLogger
    ) -> tuple[User, bool]:
        """Return the user after any due reset, and whether this call reset it."""
        user = await self._user_repo.get(db, user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        today = self._today()
        if user.last_reset_date is None or user.last_reset_date < today:
            reset = await self._user_repo.reset_if_stale(db, user_id=user_id, today=today)
            if reset is not None:
                await db.commit()
                log.debug(f"Daily usage reset for {today.isoformat()}")
                return reset, True
            # Another request reset it first.
            return await self._reread(db, user_id), False

        if user.usage_count > user.usage_limit:
            reset = await self._user_repo.reset_if_over_limit(db, user_id=user_id, today=today)
            if reset is not None:
                await db.commit()
                log.warning(
                    f"usage_count {user.usage_count} exceeded usage_limit {user.usage_limit} "
                    "on the current day; counter force-reset"
                )
                return reset, True
            return await self._reread(db, user_id), False

        return user, False

    async def _reread(self, db: AsyncSession, user_id: int) -> User:
        user = await self._user_repo.get(db, user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    def _log(ctx: Optional[BaseContext], user_id: int) -> ContextualLogger:
        base = ctx.logger if ctx is not None else logger
        return base.with_context(user_id=str(user_id), component="quota")

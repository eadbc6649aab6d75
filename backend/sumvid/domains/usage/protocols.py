"""Usage domain protocols."""

from typing import Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.context import BaseContext
from sumvid.domains.usage.types import IncrementResult, UsageSnapshot


@runtime_checkable
class QuotaServiceProtocol(Protocol):
    """Daily quota bookkeeping for a single user."""

    async def get_usage(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> UsageSnapshot:
        """Apply any due reset, then return the counters."""
        ...

    async def reset_if_needed(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> bool:
        """Reset the counter if the UTC day changed. Returns whether it did."""
        ...

    async def increment_if_allowed(
        self, db: AsyncSession, user_id: int, ctx: Optional[BaseContext] = None
    ) -> IncrementResult:
        """Atomically consume one unit of quota if any is left."""
        ...

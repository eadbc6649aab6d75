"""Usage domain types."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sumvid.domains.billing.types import EntitlementResolver
from sumvid.domains.usage.exceptions import UsageLimitReachedError
from sumvid.models.user import User


@dataclass(frozen=True)
class UsageSnapshot:
    """Counters of one user as observed at one moment."""

    used: int
    limit: int
    reset_date: Optional[date]
    subscription_status: str

    @property
    def remaining(self) -> int:
        """Generations left today, floored at zero."""
        return max(0, self.limit - self.used)

    @property
    def is_unlimited(self) -> bool:
        """Whether the limit is the unlimited sentinel."""
        return EntitlementResolver.is_unlimited(self.limit)

    @classmethod
    def from_user(cls, user: User) -> "UsageSnapshot":
        """Build a snapshot from a user row."""
        return cls(
            used=user.usage_count,
            limit=user.usage_limit,
            reset_date=user.last_reset_date,
            subscription_status=user.subscription_status,
        )


@dataclass(frozen=True)
class IncrementResult:
    """Outcome of a conditional increment."""

    allowed: bool
    usage: UsageSnapshot

    def raise_for_limit(self) -> "IncrementResult":
        """Raise UsageLimitReachedError if the increment was refused."""
        if not self.allowed:
            raise UsageLimitReachedError(self.usage)
        return self

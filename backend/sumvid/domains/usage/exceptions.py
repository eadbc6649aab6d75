"""Usage domain exceptions."""

from typing import TYPE_CHECKING

from sumvid.core.exceptions import SumvidException

if TYPE_CHECKING:
    from sumvid.domains.usage.types import UsageSnapshot


class UsageLimitReachedError(SumvidException):
    """Raised when the daily quota is exhausted.

    Carries the usage snapshot observed when the increment was refused.
    """

    kind = "limit_reached"

    def __init__(self, usage: "UsageSnapshot", message: str = "Daily usage limit reached"):
        """Initialize with the refusing snapshot."""
        self.usage = usage
        super().__init__(message)

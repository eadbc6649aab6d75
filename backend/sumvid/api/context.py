"""HTTP API request context.

Extends BaseContext with request tracking. Only the API layer creates these
via deps.get_context() / deps.get_optional_context().
"""

from dataclasses import dataclass

from sumvid.core.context import BaseContext


@dataclass
class ApiContext(BaseContext):
    """Full HTTP request context.

    Inherits identity and logger from BaseContext. ``user_id`` is None for
    guests on endpoints that accept optional authentication.
    """

    # Request metadata
    request_id: str = ""

    @property
    def is_guest(self) -> bool:
        """Whether the request carried no valid bearer token."""
        return self.user_id is None

    def __str__(self) -> str:
        """Compact representation for log lines."""
        who = f"user={self.user_id}" if self.user_id is not None else "guest"
        return f"ApiContext({who}, auth={self.auth_method.value}, request_id={self.request_id[:8]})"

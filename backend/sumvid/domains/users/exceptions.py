"""Users domain exceptions."""

from sumvid.core.exceptions import NotFoundException


class UserNotFoundError(NotFoundException):
    """Raised when a user id does not resolve to a row."""

    def __init__(self, user_id: int | None = None):
        """Initialize with the offending id when known."""
        message = f"User {user_id} not found" if user_id is not None else "User not found"
        self.user_id = user_id
        super().__init__(message)

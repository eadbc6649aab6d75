"""User domain protocols."""

from typing import Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.models.user import User


@runtime_checkable
class UserServiceProtocol(Protocol):
    """User registration."""

    async def register(self, db: AsyncSession, *, email: str, name: Optional[str] = None) -> User:
        """Create a Freemium user."""
        ...

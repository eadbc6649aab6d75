"""User service: registration with Freemium defaults."""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sumvid.core.exceptions import InvalidStateError
from sumvid.domains.billing.types import EntitlementResolver, SubscriptionStatus
from sumvid.domains.users.protocols import UserServiceProtocol
from sumvid.domains.users.repository import UserRepositoryProtocol, normalize_email
from sumvid.models.user import User


class UserService(UserServiceProtocol):
    """Creates user rows. Credentials are handled by the auth collaborator."""

    def __init__(self, user_repo: UserRepositoryProtocol, resolver: EntitlementResolver) -> None:
        """Initialize with the user repository and the entitlement resolver."""
        self._user_repo = user_repo
        self._resolver = resolver

    async def register(self, db: AsyncSession, *, email: str, name: Optional[str] = None) -> User:
        """Create a Freemium user.

        Raises:
            InvalidStateError: If the email is already registered.
        """
        email = normalize_email(email)
        if await self._user_repo.get_by_email(db, email=email) is not None:
            raise InvalidStateError(f"User with email {email} already exists")

        entitlement = self._resolver.resolve(SubscriptionStatus.FREEMIUM)
        try:
            user = await self._user_repo.create(
                db,
                email=email,
                name=name,
                usage_limit=entitlement.usage_limit,
                subscription_status=entitlement.status.value,
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise InvalidStateError(f"User with email {email} already exists") from e
        return user

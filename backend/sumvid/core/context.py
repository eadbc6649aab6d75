"""Base context for all operations.

Services type-hint against BaseContext. The API layer builds the richer
ApiContext; webhook processing and scripts use ``BaseContext.for_system``.
"""

from dataclasses import dataclass, field
from typing import Optional

from sumvid.core.logging import ContextualLogger
from sumvid.core.shared_models import AuthMethod


@dataclass
class BaseContext:
    """Identity and logger for a unit of work.

    ``logger`` defaults to the module logger enriched with the identity
    dimensions when not provided.
    """

    user_id: Optional[int] = None
    auth_method: AuthMethod = AuthMethod.SYSTEM

    logger: ContextualLogger = field(default=None, kw_only=True, repr=False)

    def __post_init__(self):
        """Auto-derive logger from identity if not provided."""
        if self.logger is None:
            from sumvid.core.logging import logger as base_logger

            self.logger = base_logger.with_context(
                auth_method=self.auth_method.value,
                user_id=str(self.user_id) if self.user_id is not None else None,
            )

    @property
    def is_authenticated(self) -> bool:
        """Whether a user identity is attached."""
        return self.user_id is not None

    @classmethod
    def for_system(cls, source: str, user_id: Optional[int] = None) -> "BaseContext":
        """Build a context for work not triggered by an end user."""
        from sumvid.core.logging import logger as base_logger

        auth_method = (
            AuthMethod.STRIPE_WEBHOOK if source == "stripe_webhook" else AuthMethod.SYSTEM
        )
        return cls(
            user_id=user_id,
            auth_method=auth_method,
            logger=base_logger.with_context(
                context_base=source,
                auth_method=auth_method.value,
                user_id=str(user_id) if user_id is not None else None,
            ),
        )

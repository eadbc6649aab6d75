"""Dependency Injection Container.

The container is a simple immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.

Design principles:
- Container serves, factory builds
- Fail fast: all construction at startup
- Type safety: fields are protocol types
- Testing: construct directly with fakes
"""

from dataclasses import dataclass, replace
from typing import Any

from sumvid.core.protocols import GenerationClient, PaymentGatewayProtocol
from sumvid.domains.billing.ledger import ProcessedEventLedgerProtocol
from sumvid.domains.billing.protocols import CheckoutServiceProtocol, SubscriptionSyncProtocol
from sumvid.domains.billing.types import EntitlementResolver
from sumvid.domains.generation.protocols import GenerationServiceProtocol
from sumvid.domains.usage.protocols import QuotaServiceProtocol
from sumvid.domains.users.protocols import UserServiceProtocol
from sumvid.domains.users.repository import UserRepositoryProtocol


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # Production: use the global container built by factory
        from sumvid.core.container import container
        usage = await container.quota_service.get_usage(db, user_id)

        # Testing: construct directly with fakes (see backend/conftest.py
        # for the full test_container fixture)
        test_container = Container(payment_gateway=FakePaymentGateway(), ...)

        # FastAPI endpoints: use Inject() to pull individual protocols
        from sumvid.api.deps import Inject
        async def my_endpoint(quota: QuotaServiceProtocol = Inject(QuotaServiceProtocol)):
            ...
    """

    # External adapters
    payment_gateway: PaymentGatewayProtocol
    generation_client: GenerationClient

    # Persistence
    user_repo: UserRepositoryProtocol
    event_ledger: ProcessedEventLedgerProtocol

    # Plan rules (pure, shared by quota, webhook and registration paths)
    entitlement_resolver: EntitlementResolver

    # Usage domain
    quota_service: QuotaServiceProtocol

    # Billing domain
    subscription_sync: SubscriptionSyncProtocol
    checkout_service: CheckoutServiceProtocol

    # Generation pass-through
    generation_service: GenerationServiceProtocol

    # User registration
    user_service: UserServiceProtocol

    # -----------------------------------------------------------------
    # Convenience methods
    # -----------------------------------------------------------------

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for partial overrides in tests:

            modified = container.replace(payment_gateway=FakePaymentGateway())

        Args:
            **changes: Dependency name -> new implementation

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)

"""Core protocols for dependency injection.

Cross-cutting infrastructure protocols only. Domain protocols live in their
respective domains/ directories.
"""

from sumvid.core.protocols.generation import GenerationClient
from sumvid.core.protocols.payment import PaymentGatewayProtocol

__all__ = [
    "GenerationClient",
    "PaymentGatewayProtocol",
]

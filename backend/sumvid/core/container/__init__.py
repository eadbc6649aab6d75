"""Dependency Injection Container Module.

This module provides the DI container and factory for wiring dependencies
across the application.

Usage:
------
    # Initialize at startup (call once from main.py)
    from sumvid.core.container import initialize_container
    from sumvid.core.config import settings
    initialize_container(settings)

    # In FastAPI deps.py
    from sumvid.core import container as container_mod
    def get_container() -> Container:
        return container_mod.container

    # In tests (construct directly with fakes, don't use global)
    from sumvid.core.container import Container
    test_container = Container(
        payment_gateway=FakePaymentGateway(),
        generation_client=FakeGenerationClient(),
        ...
    )

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from typing import TYPE_CHECKING

from sumvid.core.container.container import Container
from sumvid.core.container.factory import create_container

if TYPE_CHECKING:
    from sumvid.core.config import Settings

__all__ = ["Container", "create_container", "container", "initialize_container"]


# ---------------------------------------------------------------------------
# Global container instance
# ---------------------------------------------------------------------------

container: Container | None = None
"""Global container instance.

Initialized via `initialize_container()` at application startup.

Do NOT import this in domain code. Domains receive dependencies
via constructor parameters, never by importing the container directly.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Args:
        settings: Application settings from core/config

    Raises:
        RuntimeError: If called more than once (container already initialized)
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)


def reset_container() -> None:
    """Reset the global container to None. For testing only."""
    global container
    container = None

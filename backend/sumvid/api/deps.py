"""Dependencies that are used in the API endpoints."""

import uuid
from typing import Optional, get_type_hints

from fastapi import Depends, Header, Request

from sumvid.api.auth import authenticate, bearer_token
from sumvid.api.context import ApiContext
from sumvid.core import container as container_mod
from sumvid.core.container import Container
from sumvid.core.exceptions import UnauthorizedException
from sumvid.core.logging import logger
from sumvid.core.shared_models import AuthMethod
from sumvid.db.session import get_db

__all__ = ["Inject", "get_container", "get_context", "get_db", "get_optional_context"]


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _build_context(request: Request, user_id: Optional[int]) -> ApiContext:
    request_id = _request_id(request)
    auth_method = AuthMethod.BEARER if user_id is not None else AuthMethod.GUEST
    return ApiContext(
        user_id=user_id,
        auth_method=auth_method,
        request_id=request_id,
        logger=logger.with_context(
            request_id=request_id,
            auth_method=auth_method.value,
            user_id=str(user_id) if user_id is not None else None,
        ),
    )


async def get_context(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> ApiContext:
    """Create the request context for an endpoint that requires a bearer token.

    Raises:
        UnauthorizedException: If the token is missing or invalid.
    """
    user_id = authenticate(bearer_token(authorization))
    return _build_context(request, user_id)


async def get_optional_context(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> ApiContext:
    """Create the request context for an endpoint open to guests.

    An invalid token is logged and the request continues as a guest.
    """
    token = bearer_token(authorization)
    if token is None:
        return _build_context(request, None)
    try:
        user_id = authenticate(token)
    except UnauthorizedException as e:
        logger.with_context(request_id=_request_id(request)).info(
            f"Ignoring bearer token on guest-capable endpoint: {e.message}"
        )
        return _build_context(request, None)
    return _build_context(request, user_id)


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# ---------------------------------------------------------------------------
# Protocol Injection
# ---------------------------------------------------------------------------

# Cache of protocol_type → Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type.

    Uses get_type_hints() to introspect the Container dataclass.
    Result is cached so the lookup happens at most once per protocol type.
    """
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802
    """Resolve a protocol implementation from the DI container.

    Works like ``Depends()`` but looks up the implementation by protocol type
    instead of requiring the caller to know about the Container internals.

    Usage in FastAPI endpoints::

        from sumvid.api.deps import Inject
        from sumvid.domains.usage.protocols import QuotaServiceProtocol


        @router.get("/usage")
        async def usage(quota: QuotaServiceProtocol = Inject(QuotaServiceProtocol)):
            ...
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)

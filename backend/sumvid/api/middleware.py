"""Middleware and exception handlers for the FastAPI application.

Every error body carries ``kind`` (machine-readable) and ``detail``
(human-readable).
"""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sumvid.core.config import settings
from sumvid.core.config.enums import Environment
from sumvid.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    ExternalServiceError,
    InvalidStateError,
    NotFoundException,
    SumvidException,
    UnauthorizedException,
)
from sumvid.core.logging import logger
from sumvid.domains.usage.exceptions import UsageLimitReachedError
from sumvid.schemas.usage import UsageResponse


def error_body(exc: SumvidException, **extra) -> dict:
    """Render a SumvidException as an API error body."""
    return {"kind": exc.kind, "detail": str(exc), **extra}


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log incoming requests.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    request_id = getattr(request.state, "request_id", None)
    logger.with_context(request_id=request_id).info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions and turn them into 500 responses."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        content = {
            "kind": SumvidException.kind,
            "detail": f"Internal Server Error: {exc.__class__.__name__}",
        }
        if settings.ENVIRONMENT == Environment.LOCAL:
            content["trace"] = traceback.format_exc()
        return JSONResponse(status_code=500, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Exception handler for request bodies that fail schema validation.

    Returns:
    -------
        JSONResponse: 422 with one ``{location: message}`` entry per error.

    """
    errors = [
        {".".join(str(part) for part in error["loc"]): error["msg"]} for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=422,
        content={"kind": "validation_error", "detail": "Invalid request", "errors": errors},
    )


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content=error_body(exc))


async def unauthorized_exception_handler(
    request: Request, exc: UnauthorizedException
) -> JSONResponse:
    """Exception handler for UnauthorizedException.

    Returns:
    -------
        JSONResponse: A 401 Unauthorized response with a bearer challenge.

    """
    return JSONResponse(
        status_code=401,
        content=error_body(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def usage_limit_reached_exception_handler(
    request: Request, exc: UsageLimitReachedError
) -> JSONResponse:
    """Exception handler for UsageLimitReachedError.

    Returns:
    -------
        JSONResponse: A 403 Forbidden response carrying the refusing usage snapshot.

    """
    usage = UsageResponse.from_snapshot(exc.usage).model_dump(by_alias=True)
    return JSONResponse(status_code=403, content=error_body(exc, usage=usage))


async def invalid_state_exception_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """Exception handler for InvalidStateError and its subclasses.

    Covers bad webhook signatures and billing being disabled.

    Returns:
    -------
        JSONResponse: A 400 Bad Request status response that details the error message.

    """
    return JSONResponse(status_code=400, content=error_body(exc))


async def sumvid_exception_handler(request: Request, exc: SumvidException) -> JSONResponse:
    """Generic exception handler for all SumvidException types.

    Maps exception base classes to HTTP status codes. Subclasses of a mapped
    base get the same code without being registered here.
    """
    status_map = {
        BadRequestError: 400,
        ConfigurationError: 500,
        ExternalServiceError: 502,
    }

    for exc_type, code in status_map.items():
        if isinstance(exc, exc_type):
            if code >= 500:
                logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc}")
            return JSONResponse(status_code=code, content=error_body(exc))

    logger.error(f"Unmapped {exc.__class__.__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error_body(exc))

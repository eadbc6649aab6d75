"""Logging setup for the SumVid backend.

Exposes a single module-level ``logger`` (a ContextualLogger). Callers attach
dimensions with ``with_context`` and get a child logger that renders them on
every record::

    from sumvid.core.logging import logger

    log = logger.with_context(request_id=request_id, user_id="42")
    log.info("Usage incremented")
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

from sumvid.core.config import settings
from sumvid.core.config.enums import Environment

_ROOT_LOGGER_NAME = "sumvid"


class _DimensionFormatter(logging.Formatter):
    """Appends the record's dimensions as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if not dimensions:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in sorted(dimensions.items()))
        return f"{base} [{rendered}]"


class ContextualLogger(logging.LoggerAdapter):
    """LoggerAdapter carrying a dict of dimensions and an optional message prefix."""

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Wrap *logger* with the given dimensions."""
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions: dict[str, Any] = dict(dimensions or {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, Any]:
        """Inject dimensions into ``extra`` and prepend the prefix."""
        extra = dict(kwargs.get("extra") or {})
        merged = dict(self.dimensions)
        merged.update(extra.pop("dimensions", {}) or {})
        extra["dimensions"] = merged
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a child logger with extra dimensions. None values are dropped."""
        merged = dict(self.dimensions)
        merged.update({k: v for k, v in dimensions.items() if v is not None})
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a child logger that prefixes every message."""
        return ContextualLogger(self.logger, self.dimensions, self.prefix + prefix)


def _configure_root_logger() -> logging.Logger:
    base = logging.getLogger(_ROOT_LOGGER_NAME)
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.ENVIRONMENT == Environment.LOCAL:
            fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
        else:
            fmt = "%(asctime)s %(levelname)s %(name)s %(process)d: %(message)s"
        handler.setFormatter(_DimensionFormatter(fmt))
        base.addHandler(handler)
        base.propagate = False
    base.setLevel(settings.LOG_LEVEL.upper())
    return base


logger = ContextualLogger(_configure_root_logger())

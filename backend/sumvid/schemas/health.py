"""Health check response schema."""

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Result of the database connectivity probe."""

    status: Literal["healthy", "unhealthy"]
    database: Literal["up", "down"]
    error: str | None = None

"""Configuration module for the SumVid backend.

Usage:
    from sumvid.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from sumvid.core.config.enums import Environment
from sumvid.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "settings",
]

# Singleton settings instance
settings = Settings()

"""Application settings.

All values load from the environment (or a local ``.env`` file) through
pydantic-settings. Import the singleton from ``sumvid.core.config``.
"""

from typing import Optional

from pydantic import PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sumvid.core.config.enums import Environment


class Settings(BaseSettings):
    """Settings for the SumVid backend.

    Attributes:
    ----------
        PROJECT_NAME: Name shown in the OpenAPI docs.
        ENVIRONMENT: Deployment environment.
        LOG_LEVEL: Root log level for the ``sumvid`` logger.
        POSTGRES_*: Connection parts used when DATABASE_URL is unset.
        DATABASE_URL: Full connection string; overrides the POSTGRES_* parts.
        STRIPE_ENABLED: Wire the real Stripe gateway instead of the null one.
        STRIPE_PRICE_ID: Price of the Premium subscription.
        FREEMIUM_DAILY_LIMIT: Daily generation quota for Freemium accounts.
        PROCESSED_EVENT_RETENTION: How many webhook event ids the ledger keeps.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "SumVid"
    ENVIRONMENT: Environment = Environment.LOCAL
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "sumvid"
    POSTGRES_PASSWORD: str = "sumvid"
    POSTGRES_DB: str = "sumvid"
    DATABASE_URL: Optional[str] = None
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    RUN_ALEMBIC_MIGRATIONS: bool = False

    # Stripe
    STRIPE_ENABLED: bool = False
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_PRICE_ID: Optional[str] = None
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_GATEWAY_MAX_ATTEMPTS: int = 3
    FRONTEND_URL: str = "http://localhost:3000"

    # Auth
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_HOURS: int = 24 * 7

    # Generation
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    GENERATION_TIMEOUT_SECONDS: float = 60.0
    GENERATION_MAX_RETRIES: int = 2

    # Quotas and webhooks
    FREEMIUM_DAILY_LIMIT: int = 10
    PROCESSED_EVENT_RETENTION: int = 1000

    ADDITIONAL_CORS_ORIGINS: Optional[str] = None

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Force the asyncpg driver on plain postgres URLs."""
        if not v:
            return None
        for prefix in ("postgres://", "postgresql://"):
            if v.startswith(prefix):
                return "postgresql+asyncpg://" + v[len(prefix) :]
        return v

    @model_validator(mode="after")
    def _check_limits(self) -> "Settings":
        if self.FREEMIUM_DAILY_LIMIT < 1:
            raise ValueError("FREEMIUM_DAILY_LIMIT must be positive")
        if self.PROCESSED_EVENT_RETENTION < 1:
            raise ValueError("PROCESSED_EVENT_RETENTION must be positive")
        return self

    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:  # noqa: N802
        """Async SQLAlchemy connection string."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )


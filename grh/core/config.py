"""Application configuration loaded from environment variables.

Settings for database, API, authentication, blob storage, posting lifecycle
and notification dispatch. Uses pydantic-settings for validation and .env
file support.
"""

import uuid

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "grh_dev_password"  # nosec B105

# Minimum length for AUTH_SECRET in production (256 bits = 32 bytes)
_MIN_AUTH_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "grh"
    database_user: str = "grh_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS (Security)
    # Default allows localhost:3000 for the React dashboard in development
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Authentication
    # Local mode: DEFAULT_USER_ID provides user context without JWT
    # Hosted mode: auth_enabled=True, Bearer JWT required on every request
    default_user_id: uuid.UUID | None = None
    auth_enabled: bool = False
    auth_secret: SecretStr = SecretStr("")
    auth_issuer: str = "grh-backend"
    auth_audience: str = "grh-backend"
    auth_token_ttl_minutes: int = 180

    # Blob storage
    upload_dir: str = "uploads"
    cv_max_size_mb: int = 10
    report_max_size_mb: int = 5
    material_max_size_mb: int = 20

    # Job posting lifecycle
    posting_lifetime_days: int = 30

    # Notification dispatch retry policy
    notification_max_retries: int = 3
    notification_retry_base_delay_ms: int = 100
    notification_retry_max_delay_ms: int = 2000
    # Outbox rows are dropped after this many failed deliveries
    notification_outbox_max_attempts: int = 10

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "5/15minute")
    rate_limit_register: str = "3/hour"
    rate_limit_login: str = "5/15minute"
    rate_limit_upload: str = "30/hour"
    rate_limit_enabled: bool = True  # Disable for testing

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def database_url_sync(self) -> str:
        """Sync database URL for Alembic."""
        return (
            f"postgresql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants and production security requirements.

        Checks:
        - Retry settings must be positive (all environments)
        - Lifetime and size limits must be positive (all environments)
        - CORS must not use wildcard origin (incompatible with credentials)
        - Database password must not be the default in production
        - AUTH_SECRET must be set and >= 32 chars when auth is enabled in production
        """
        if self.notification_max_retries < 0:
            msg = (
                "NOTIFICATION_MAX_RETRIES cannot be negative. "
                f"Got: {self.notification_max_retries}"
            )
            raise ValueError(msg)
        if (
            self.notification_retry_base_delay_ms <= 0
            or self.notification_retry_max_delay_ms <= 0
        ):
            msg = "Notification retry delays must be positive."
            raise ValueError(msg)

        for name in (
            "posting_lifetime_days",
            "cv_max_size_mb",
            "report_max_size_mb",
            "material_max_size_mb",
            "notification_outbox_max_attempts",
        ):
            if getattr(self, name) <= 0:
                msg = f"{name.upper()} must be positive. Got: {getattr(self, name)}"
                raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            if self.auth_enabled:
                secret_value = self.auth_secret.get_secret_value()
                if not secret_value:
                    msg = (
                        "AUTH_SECRET must be set when AUTH_ENABLED=true in production. "
                        'Generate with: python -c "import secrets; '
                        'print(secrets.token_hex(32))"'
                    )
                    raise ValueError(msg)
                if len(secret_value) < _MIN_AUTH_SECRET_LENGTH:
                    msg = (
                        f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                        "characters for adequate security."
                    )
                    raise ValueError(msg)

        return self


settings = Settings()

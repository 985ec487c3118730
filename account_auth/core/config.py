"""Application configuration loaded from environment variables.

Settings for the database, signing secret, mail transport, link and token
lifetimes, profile image processing and rate limiting. Uses
pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "account_auth_dev_password"  # nosec B105

# Minimum length for APP_KEY in production (256 bits = 32 bytes)
_MIN_APP_KEY_LENGTH = 32

# Development-only signing key, rejected in production
_DEV_APP_KEY = "dev-insecure-app-key-change-me"  # nosec B105


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
    database_name: str = "account_auth"
    database_user: str = "account_auth_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000
    api_prefix: str = "/api"

    # CORS (Security)
    # CRITICAL: Never set to ["*"]; the front-end sends an Authorization header
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # Signing secret for email verification links (HMAC-SHA256)
    app_key: SecretStr = SecretStr(_DEV_APP_KEY)

    # Public URLs
    # backend_url: verification links hit the API directly
    # frontend_url: password reset links open the front-end form
    backend_url: str = "http://localhost:8000"
    frontend_url: str = "http://localhost:3000"

    # Email (Resend)
    email_from: str = "noreply@example.com"
    resend_api_key: SecretStr = SecretStr("")

    # Credential lifetimes
    verification_link_ttl_minutes: int = 60
    password_reset_ttl_minutes: int = 60
    password_reset_throttle_seconds: int = 60
    bcrypt_rounds: int = 12

    # Profile images
    storage_root: str = "storage/public"
    storage_url: str = "http://localhost:8000/storage"
    profile_image_size: int = 250
    profile_image_quality: int = 85
    profile_image_max_bytes: int = 10 * 1024 * 1024

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_auth: str = "10/minute"  # /login, /register
    rate_limit_password_reset: str = "5/minute"  # /forgot-password, /reset-password
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
        """Validate production security requirements.

        Checks:
        - Credential lifetimes must be positive (all environments)
        - CORS must not use wildcard origin (all environments)
        - Database password must not be the default in production
        - APP_KEY must be set, non-default and >= 32 chars in production
        """
        for name in (
            "verification_link_ttl_minutes",
            "password_reset_ttl_minutes",
            "bcrypt_rounds",
        ):
            if getattr(self, name) <= 0:
                msg = f"{name.upper()} must be positive. Got: {getattr(self, name)}"
                raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "List the front-end origin(s) explicitly."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            key = self.app_key.get_secret_value()
            if not key or key == _DEV_APP_KEY:
                msg = (
                    "APP_KEY must be set in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)
            if len(key) < _MIN_APP_KEY_LENGTH:
                msg = (
                    f"APP_KEY must be at least {_MIN_APP_KEY_LENGTH} "
                    "characters for adequate security."
                )
                raise ValueError(msg)

        return self


settings = Settings()

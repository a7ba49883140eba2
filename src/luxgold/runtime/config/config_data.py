"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization", "X-CSRF-Token", "X-Request-ID"]
    )


class RateLimiterConfig(BaseModel):
    """Rate limiter configuration model."""

    requests: int = Field(
        default=100, description="Number of requests allowed per window"
    )
    window_ms: int = Field(default=60000, description="Time window in milliseconds")
    enabled: bool = Field(default=True, description="Enable rate limiting")
    per_endpoint: bool = Field(
        default=True, description="Apply rate limiting per endpoint"
    )
    per_method: bool = Field(
        default=True, description="Apply rate limiting per HTTP method"
    )


class RetryConfig(BaseModel):
    """Retry policy for transient database errors.

    The code and substring lists are matched against the error raised by the
    database driver; anything that matches none of them is treated as fatal.
    """

    max_retries: int = Field(default=3, ge=1, description="Maximum attempts")
    base_delay_ms: int = Field(
        default=200, ge=0, description="Base delay for exponential backoff"
    )
    max_delay_ms: int = Field(default=5000, ge=0, description="Backoff upper bound")
    jitter_ms: int = Field(default=100, ge=0, description="Maximum random jitter")
    log_message_length: int = Field(
        default=200, description="Error messages are truncated to this length in logs"
    )

    prepared_statement_codes: list[str] = Field(
        default_factory=lambda: ["P2030", "42P05", "26000"]
    )
    prepared_statement_messages: list[str] = Field(
        default_factory=lambda: ["prepared statement"]
    )
    connection_codes: list[str] = Field(
        default_factory=lambda: [
            "P1001",
            "P1002",
            "P1008",
            "P1017",
            "P2024",
            "08000",
            "08001",
            "08003",
            "08006",
            "57P01",
            "ECONNRESET",
            "ECONNREFUSED",
            "ETIMEDOUT",
            "ENOTFOUND",
            "EAI_AGAIN",
        ]
    )
    connection_messages: list[str] = Field(
        default_factory=lambda: [
            "can't reach database server",
            "could not connect",
            "connection refused",
            "connection reset",
            "connection closed",
            "server closed the connection",
            "timed out",
            "timeout",
            "name or service not known",
            "temporary failure in name resolution",
        ]
    )
    transaction_codes: list[str] = Field(
        default_factory=lambda: ["P2034", "40001", "40P01"]
    )
    transaction_messages: list[str] = Field(
        default_factory=lambda: [
            "deadlock",
            "could not serialize access",
            "write conflict",
            "database is locked",
        ]
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default="logs/app.log", description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class PricesConfig(BaseModel):
    """Live gold and currency price feed configuration."""

    enabled: bool = Field(default=True, description="Query the upstream feed")
    source_url: str = Field(
        default="https://www.tgju.org/ajax/chart/latest/currency,gold",
        description="Upstream JSON endpoint",
    )
    referer: str = Field(default="https://www.tgju.org/")
    timeout_seconds: float = Field(default=5.0, description="Upstream request timeout")
    cache_ttl_seconds: int = Field(
        default=60, ge=0, description="How long a fetched quote set is reused"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./database.db",
        description="Database connection URL",
    )
    user: str | None = Field(default=None, description="Database username")
    app_db: str | None = Field(default=None, description="Database name")
    pool_size: int = Field(default=5, description="Connection pool size")
    environment_mode: str = Field(
        default="development", description="Environment mode: development or production"
    )
    max_overflow: int = Field(default=5, description="Maximum pool overflow")
    pool_timeout: int = Field(default=15, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    connect_timeout: int = Field(default=10, description="Connect timeout in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @computed_field
    @property
    def password(self) -> str | None:
        """
        Get the database password from the appropriate source.
        1. In development or test mode, parse it from the URL if present
        2. In production mode, read it from the mounted secrets file given by
           `password_file` or the environment variable named by `password_env_var`
        """
        if self.is_sqlite:
            return None

        from sqlalchemy.engine import make_url

        if self.environment_mode in ("development", "test"):
            return make_url(self.url).password
        elif self.environment_mode == "production":
            if self.password_file:
                try:
                    with open(self.password_file) as f:
                        return f.read().strip()
                except OSError as e:
                    raise ValueError(
                        "Failed to read database password from file."
                    ) from e
            elif self.password_env_var:
                import os

                password = os.getenv(self.password_env_var)
                if password:
                    return password
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
            return make_url(self.url).password
        else:
            raise ValueError(
                "Invalid environment_mode; must be 'development', 'production', or 'test'"
            )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with password if provided."""
        if self.is_sqlite:
            return self.url

        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)

        if base_url.password and self.environment_mode == "production":
            logger.warning(
                "Database URL contains a password in production mode; "
                "consider using a secrets file or environment variable."
            )

        if self.user and self.user != base_url.username:
            logger.warning(
                f"Database user '{self.user}' does not match the one in the URL '{base_url.username}'. Using '{self.user}'."
            )
            base_url = base_url.set(username=self.user)

        if self.app_db and self.app_db != base_url.database:
            logger.warning(
                f"Database name '{self.app_db}' does not match the one in the URL '{base_url.database}'. Using '{self.app_db}'."
            )
            base_url = base_url.set(database=self.app_db)

        resolved_password = self.password
        if resolved_password and resolved_password != base_url.password:
            base_url = base_url.set(password=resolved_password)

        # Render manually so SQLAlchemy does not mask the password
        return base_url.render_as_string(hide_password=False)


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    session_signing_secret: str | None = Field(
        default=None, description="Secret for signing sessions"
    )
    csrf_signing_secret: str | None = Field(
        default=None, description="Secret for signing CSRF tokens"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class SecurityConfig(BaseModel):
    """Security configuration for cookies and CSRF protection."""

    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", description="SameSite cookie attribute"
    )

    csrf_cookie_name: str = Field(
        default="csrf-token", description="Cookie holding the signed CSRF token"
    )
    csrf_header_name: str = Field(
        default="X-CSRF-Token", description="Header name for CSRF tokens"
    )
    csrf_token_max_age_hours: int = Field(
        default=24, description="Maximum age for CSRF cookies in hours"
    )
    csrf_protected_methods: list[str] = Field(
        default_factory=lambda: ["POST", "PUT", "PATCH", "DELETE"],
        description="HTTP methods that require a valid CSRF token",
    )


class AuthConfig(BaseModel):
    """Admin sign-in and session token settings."""

    session_cookie_name: str = Field(
        default="admin-session", description="Cookie holding the signed session token"
    )
    session_max_age_days: int = Field(
        default=30, ge=1, description="Lifetime of a session token in days"
    )
    issuer: str = Field(default="luxgold-catalog", description="Session token issuer")
    audience: str = Field(default="luxgold-admin", description="Session token audience")
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="Signing algorithm for session tokens"
    )
    clock_skew: int = Field(
        default=60, ge=0, description="Allowed clock skew in seconds when validating"
    )
    admin_roles: list[str] = Field(
        default_factory=lambda: ["ADMIN", "MANAGER"],
        description="User roles allowed to use the admin API",
    )
    bcrypt_rounds: int = Field(
        default=12, ge=4, le=31, description="bcrypt cost factor for new password hashes"
    )
    bootstrap_admin_email: str | None = Field(
        default=None, description="Admin account created by init_db when missing"
    )
    bootstrap_admin_password: str | None = Field(
        default=None, description="Password for the bootstrap admin account"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    auth: AuthConfig = Field(
        default_factory=AuthConfig, description="Admin authentication configuration"
    )
    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Rate limiter configuration"
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig, description="Database retry configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    prices: PricesConfig = Field(
        default_factory=PricesConfig, description="Price feed configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )

"""Startup validation of the resolved configuration."""

from dataclasses import dataclass, field
from urllib.parse import urlparse

from loguru import logger

from src.luxgold.runtime.config.config_data import ConfigData

MIN_SECRET_LENGTH = 32


@dataclass
class EnvValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_environment(config: ConfigData) -> EnvValidationResult:
    """Check the configuration for settings that break or weaken the service.

    Errors are settings the application cannot run with; warnings are
    settings that work but are not recommended.
    """
    result = EnvValidationResult()
    db = config.database
    is_production = config.app.environment == "production"

    if not db.url or not db.url.strip():
        result.errors.append("Missing required database URL")
    elif db.is_sqlite:
        if is_production:
            result.errors.append("SQLite is not supported in production; use PostgreSQL")
    elif not db.url.startswith(("postgresql", "postgres://")):
        result.errors.append("Database URL must be a valid PostgreSQL connection string")

    secret = config.app.csrf_signing_secret or config.app.session_signing_secret
    if not secret:
        message = "No CSRF signing secret configured"
        if is_production:
            result.errors.append(message)
        else:
            result.warnings.append(f"{message}; using the development default")
    elif len(secret) < MIN_SECRET_LENGTH:
        result.warnings.append(
            f"CSRF signing secret should be at least {MIN_SECRET_LENGTH} characters"
        )
    elif not config.app.csrf_signing_secret:
        result.warnings.append(
            "CSRF secret not set, falling back to the session secret "
            "(consider setting a separate secret)"
        )

    session_secret = config.app.session_signing_secret
    if not session_secret:
        message = "No session signing secret configured"
        if is_production:
            result.errors.append(message)
        else:
            result.warnings.append(f"{message}; admin sessions use the development default")
    elif len(session_secret) < MIN_SECRET_LENGTH:
        result.warnings.append(
            f"Session signing secret should be at least {MIN_SECRET_LENGTH} characters"
        )

    if is_production and "*" in config.app.cors.origins:
        result.errors.append("CORS origin '*' cannot be combined with credentials in production")

    for origin in config.app.cors.origins:
        if origin == "*":
            continue
        parsed = urlparse(origin)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            result.warnings.append(f"CORS origin {origin!r} is not a valid http(s) origin")

    return result


def validate_and_log_environment(config: ConfigData) -> EnvValidationResult:
    """Validate the configuration and log the findings.

    Raises:
        RuntimeError: If validation fails in production
    """
    result = validate_environment(config)

    for warning in result.warnings:
        logger.warning("Configuration warning: {}", warning)

    if result.errors:
        for error in result.errors:
            logger.error("Configuration error: {}", error)
        if config.app.environment == "production":
            raise RuntimeError(
                "Environment validation failed. Cannot start application with invalid configuration."
            )
        logger.error("Application may not function correctly with this configuration")
    elif not result.warnings:
        logger.info("Environment configuration validated successfully")

    return result

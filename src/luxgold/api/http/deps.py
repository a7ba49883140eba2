"""FastAPI dependency implementations."""

from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Request
from loguru import logger

from src.luxgold.api.http.app_data import ApplicationDependencies
from src.luxgold.api.http.errors import ApiError
from src.luxgold.core.security import is_csrf_protected_method, validate_csrf_request
from src.luxgold.core.services import DbSessionService, PriceService
from src.luxgold.core.services.auth import AdminSessionService, InvalidSessionError, SessionUser

CSRF_ERROR_MESSAGE = "Invalid or missing CSRF token"
UNAUTHORIZED_MESSAGE = "Authentication required"


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database session service instance."""
    return get_app_dependencies(request).database_service


def get_price_service(request: Request) -> PriceService:
    """Get the price service instance."""
    return get_app_dependencies(request).price_service


def get_session_service(request: Request) -> AdminSessionService:
    return get_app_dependencies(request).session_service


def get_current_user(request: Request) -> SessionUser:
    """Return the user of the session cookie.

    Raises:
        ApiError: 401 when the cookie is missing, forged or expired
    """
    sessions = get_session_service(request)
    token = request.cookies.get(sessions.cookie_name)
    if not token:
        raise ApiError(UNAUTHORIZED_MESSAGE, status_code=401, code="unauthorized")
    try:
        user = sessions.verify(token)
    except InvalidSessionError as e:
        raise ApiError(UNAUTHORIZED_MESSAGE, status_code=401, code="unauthorized") from e
    request.state.user = user
    return user


def require_admin(request: Request) -> SessionUser:
    """Allow only signed-in users with an admin role.

    Raises:
        ApiError: 401 without a valid session, 403 for other roles
    """
    user = get_current_user(request)
    if not get_session_service(request).is_admin(user):
        logger.bind(user_id=user.id, role=user.role).warning(
            "Admin access denied for {} {}", request.method, request.url.path
        )
        raise ApiError("Admin access required", status_code=403, code="forbidden")
    return user


def require_csrf(request: Request) -> None:
    """Reject state-changing requests without a valid CSRF header and cookie.

    Safe methods pass through. Every failure produces the same client error;
    the specific cause only goes to the server log.
    """
    if not is_csrf_protected_method(request.method):
        return

    check = validate_csrf_request(request)
    if not check.valid:
        logger.bind(csrf_failure=str(check.failure)).warning(
            "CSRF validation failed for {} {}: {}",
            request.method,
            request.url.path,
            check.failure,
        )
        raise ApiError(CSRF_ERROR_MESSAGE, status_code=403, code="csrf_failed")


def rate_limit(
    requests: int | None = None, window_ms: int | None = None
) -> Callable[[Request], Coroutine[Any, Any, None]]:
    """Return a dependency enforcing request quotas (defaults from config)."""

    async def dependency(request: Request) -> None:
        registry = get_app_dependencies(request).rate_limiters
        if not registry.enabled:
            return
        await registry.get(requests, window_ms)(request)

    return dependency

"""Admin sign-in with email and password."""

from collections.abc import Callable

from fastapi import APIRouter, Depends, Request, Response
from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session

from src.luxgold.api.http.deps import (
    get_current_user,
    get_database_service,
    get_session_service,
    rate_limit,
    require_csrf,
)
from src.luxgold.api.http.errors import ApiError
from src.luxgold.core.services.auth import (
    SessionUser,
    burn_password_check,
    verify_password,
)
from src.luxgold.core.services.database.db_retry import with_database_retry
from src.luxgold.entities.core.user import User, UserRepository
from src.luxgold.runtime.context import get_config

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(require_csrf)])

# Tighter than the default quota to slow down password guessing
LOGIN_ATTEMPTS_PER_MINUTE = 10


class LoginRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


def _authenticate(email: str, password: str) -> Callable[[Session], User | None]:
    def operation(session: Session) -> User | None:
        found = UserRepository(session).get_credentials(email)
        if found is None:
            burn_password_check(password)
            return None
        user, password_hash = found
        return user if verify_password(password, password_hash) else None

    return operation


@router.post(
    "/login",
    dependencies=[Depends(rate_limit(requests=LOGIN_ATTEMPTS_PER_MINUTE, window_ms=60_000))],
)
async def login(payload: LoginRequest, request: Request, response: Response) -> dict[str, SessionUser]:
    user = await with_database_retry(
        get_database_service(request), _authenticate(payload.email, payload.password)
    )
    if user is None:
        logger.bind(email=payload.email).info("Failed sign-in")
        raise ApiError("Invalid email or password", status_code=401, code="invalid_credentials")

    sessions = get_session_service(request)
    token = sessions.issue(user)
    config = get_config()
    response.set_cookie(
        key=sessions.cookie_name,
        value=token,
        max_age=sessions.max_age_seconds,
        path="/",
        secure=config.app.environment == "production",
        httponly=True,
        samesite=config.security.cookie_samesite,
    )
    logger.bind(user_id=user.id, role=user.role).info("Signed in")
    return {"user": sessions.verify(token)}


@router.post("/logout", status_code=204)
async def logout(request: Request, response: Response) -> None:
    response.delete_cookie(get_session_service(request).cookie_name, path="/")


@router.get("/session")
async def current_session(user: SessionUser = Depends(get_current_user)) -> dict[str, SessionUser]:
    return {"user": user}

"""Signed session tokens for the admin API.

A session is a short HS256 JWT carried in an httpOnly cookie. It is
stateless: the token holds the user's id, email, name and role, and is
trusted until it expires.
"""

import time
from datetime import UTC, datetime

from authlib.common.security import generate_token
from authlib.jose import JoseError, JsonWebToken
from loguru import logger
from pydantic import BaseModel

from src.luxgold.core.security import get_session_secret
from src.luxgold.entities.core.user import User
from src.luxgold.runtime.config.config_data import AuthConfig
from src.luxgold.runtime.context import get_config


class InvalidSessionError(Exception):
    """The session token is missing, malformed, forged or expired."""


class SessionUser(BaseModel):
    """The signed-in user as recorded in the session token."""

    id: str
    email: str
    name: str | None = None
    role: str
    expires_at: datetime


class AdminSessionService:
    """Issue and verify admin session tokens."""

    def __init__(self, config: AuthConfig | None = None, secret: str | None = None) -> None:
        self._config = config or get_config().auth
        self._secret = secret or get_session_secret()
        self._jwt = JsonWebToken([self._config.algorithm])

    @property
    def cookie_name(self) -> str:
        return self._config.session_cookie_name

    @property
    def max_age_seconds(self) -> int:
        return self._config.session_max_age_days * 24 * 3600

    def is_admin(self, user: SessionUser) -> bool:
        return user.role in self._config.admin_roles

    def issue(self, user: User, now: int | None = None) -> str:
        """Return a signed token for ``user``."""
        issued_at = int(time.time()) if now is None else now
        payload = {
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "sub": user.id,
            "iat": issued_at,
            "exp": issued_at + self.max_age_seconds,
            "jti": generate_token(16),
            "email": user.email,
            "name": user.name,
            "role": user.role,
        }
        header = {"alg": self._config.algorithm, "typ": "JWT"}
        token = self._jwt.encode(header, payload, self._secret)
        return token.decode() if isinstance(token, bytes) else token

    def verify(self, token: str, now: int | None = None) -> SessionUser:
        """Decode and validate ``token``.

        Raises:
            InvalidSessionError: If the signature, issuer, audience or expiry is wrong
        """
        claims_options = {
            "iss": {"essential": True, "value": self._config.issuer},
            "aud": {"essential": True, "value": self._config.audience},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }
        try:
            claims = self._jwt.decode(token, self._secret, claims_options=claims_options)
            claims.validate(now=now, leeway=self._config.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.bind(error_type=type(exc).__name__).info("Rejected session token: {}", exc)
            raise InvalidSessionError(str(exc)) from exc

        role = claims.get("role")
        email = claims.get("email")
        if not isinstance(role, str) or not isinstance(email, str):
            raise InvalidSessionError("Session token is missing user claims")

        return SessionUser(
            id=claims["sub"],
            email=email,
            name=claims.get("name"),
            role=role,
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
        )

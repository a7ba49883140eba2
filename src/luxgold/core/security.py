"""CSRF protection using the double-submit cookie pattern.

The server issues a random token, stores ``token.signature`` in an httpOnly
cookie and hands the raw token to the client, which echoes it back in the
``X-CSRF-Token`` header on state-changing requests. A cross-site attacker
can make the browser send the cookie but can neither read it nor set the
header.
"""

import enum
import hashlib
import hmac
import secrets
from dataclasses import dataclass

from fastapi import Request, Response

from src.luxgold.runtime.context import get_config

CSRF_TOKEN_BYTES = 32
CSRF_SIGNATURE_LENGTH = 16
CSRF_SEPARATOR = "."

_DEV_SECRET = "dev-csrf-secret-change-in-production"
_DEV_SESSION_SECRET = "dev-session-secret-change-in-production"

# Safe methods are never guarded, whatever the configuration says
CSRF_EXEMPT_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class CsrfFailure(enum.StrEnum):
    """Why a request failed CSRF validation. Never sent to the client."""

    MISSING_HEADER = "missing_header"
    MISSING_COOKIE = "missing_cookie"
    MALFORMED_COOKIE = "malformed_cookie"
    TOKEN_MISMATCH = "token_mismatch"
    BAD_SIGNATURE = "bad_signature"


@dataclass(frozen=True)
class CsrfCheck:
    """Outcome of validating one request."""

    failure: CsrfFailure | None = None

    @property
    def valid(self) -> bool:
        return self.failure is None


def get_csrf_secret() -> str:
    """Return the server secret used to sign CSRF tokens."""
    app_config = get_config().app
    return app_config.csrf_signing_secret or app_config.session_signing_secret or _DEV_SECRET


def get_session_secret() -> str:
    """Return the server secret used to sign admin session tokens."""
    return get_config().app.session_signing_secret or _DEV_SESSION_SECRET


def generate_csrf_token() -> str:
    """Generate a cryptographically secure CSRF token.

    Returns:
        64 hex characters (32 random bytes)
    """
    return secrets.token_hex(CSRF_TOKEN_BYTES)


def sign_csrf_token(token: str, secret: str | None = None) -> str:
    """Return the truncated SHA-256 signature of ``token`` under the server secret."""
    if secret is None:
        secret = get_csrf_secret()
    digest = hashlib.sha256(f"{token}{CSRF_SEPARATOR}{secret}".encode()).hexdigest()
    return digest[:CSRF_SIGNATURE_LENGTH]


def build_csrf_cookie_value(token: str, secret: str | None = None) -> str:
    """Return the cookie payload ``token.signature``."""
    return f"{token}{CSRF_SEPARATOR}{sign_csrf_token(token, secret)}"


def parse_csrf_cookie(value: str | None) -> tuple[str, str] | None:
    """Split a cookie payload into ``(token, signature)``.

    Returns:
        None unless the value holds exactly one separator with non-empty
        parts on both sides
    """
    if not value:
        return None
    parts = value.split(CSRF_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def verify_csrf_signature(token: str, signature: str, secret: str | None = None) -> bool:
    """Check ``signature`` against the expected signature for ``token``.

    The length check leaks whether the lengths differ; the comparison of the
    characters themselves is constant-time.
    """
    expected = sign_csrf_token(token, secret)
    if len(signature) != len(expected):
        return False
    return hmac.compare_digest(expected.encode(), signature.encode())


def set_csrf_cookie(response: Response, token: str) -> None:
    """Attach the signed CSRF cookie for ``token`` to ``response``."""
    config = get_config()
    security = config.security
    response.set_cookie(
        key=security.csrf_cookie_name,
        value=build_csrf_cookie_value(token),
        max_age=security.csrf_token_max_age_hours * 3600,
        path="/",
        secure=config.app.environment == "production",
        httponly=True,
        samesite=security.cookie_samesite,
    )


def check_csrf_token(header_token: str | None, cookie_value: str | None) -> CsrfCheck:
    """Validate a header token against the signed cookie value."""
    if not header_token:
        return CsrfCheck(CsrfFailure.MISSING_HEADER)
    if not cookie_value:
        return CsrfCheck(CsrfFailure.MISSING_COOKIE)

    parsed = parse_csrf_cookie(cookie_value)
    if parsed is None:
        return CsrfCheck(CsrfFailure.MALFORMED_COOKIE)
    cookie_token, signature = parsed

    if not hmac.compare_digest(cookie_token.encode(), header_token.encode()):
        return CsrfCheck(CsrfFailure.TOKEN_MISMATCH)

    if not verify_csrf_signature(cookie_token, signature):
        return CsrfCheck(CsrfFailure.BAD_SIGNATURE)

    return CsrfCheck()


def validate_csrf_request(request: Request) -> CsrfCheck:
    """Validate the CSRF header and cookie carried by ``request``."""
    security = get_config().security
    return check_csrf_token(
        request.headers.get(security.csrf_header_name),
        request.cookies.get(security.csrf_cookie_name),
    )


def is_csrf_protected_method(method: str) -> bool:
    """Return True if requests with ``method`` must carry a valid CSRF token."""
    method = method.upper()
    if method in CSRF_EXEMPT_METHODS:
        return False
    protected = {m.upper() for m in get_config().security.csrf_protected_methods}
    return method in protected

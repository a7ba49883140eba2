from .passwords import burn_password_check, hash_password, verify_password
from .session_service import AdminSessionService, InvalidSessionError, SessionUser

__all__ = [
    "AdminSessionService",
    "InvalidSessionError",
    "SessionUser",
    "burn_password_check",
    "hash_password",
    "verify_password",
]

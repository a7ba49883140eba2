"""Password hashing with bcrypt."""

from functools import lru_cache

import bcrypt

from src.luxgold.runtime.context import get_config


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash ``password`` with a fresh salt (cost from ``auth.bcrypt_rounds``)."""
    if rounds is None:
        rounds = get_config().auth.bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # malformed stored hash, or a password beyond bcrypt's 72-byte limit
        return False


@lru_cache(maxsize=1)
def _unknown_user_hash() -> str:
    return hash_password("unknown-user-placeholder")


def burn_password_check(password: str) -> None:
    """Spend the same time as a real check when the account does not exist."""
    verify_password(password, _unknown_user_hash())

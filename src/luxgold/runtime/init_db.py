"""Database initialization script."""

from loguru import logger
from sqlmodel import Session

from src.luxgold.core.services.auth import hash_password
from src.luxgold.core.services.database.db_manage import DbManageService
from src.luxgold.core.services.database.db_session import DbSessionService
from src.luxgold.entities.core.user import User, UserCreate, UserRepository
from src.luxgold.runtime.config.config_data import AuthConfig
from src.luxgold.runtime.context import get_config


def ensure_bootstrap_admin(session: Session, config: AuthConfig) -> User | None:
    """Create the configured admin account unless it already exists.

    Returns the new user, or None when nothing was created.
    """
    if not config.bootstrap_admin_email or not config.bootstrap_admin_password:
        return None

    data = UserCreate(
        email=config.bootstrap_admin_email,
        password=config.bootstrap_admin_password,
        name="Administrator",
        role="ADMIN",
    )
    repository = UserRepository(session)
    if repository.get_by_email(data.email) is not None:
        logger.debug("Bootstrap admin {} already exists", data.email)
        return None

    user = repository.create(
        User(email=data.email, name=data.name, role=data.role),
        hash_password(data.password, rounds=config.bcrypt_rounds),
    )
    logger.bind(user_id=user.id).info("Created bootstrap admin {}", user.email)
    return user


def init_db() -> None:
    """Create all database tables and the bootstrap admin account."""
    db_service = DbSessionService()
    try:
        DbManageService(db_service).create_all()
        with db_service.session_scope() as session:
            ensure_bootstrap_admin(session, get_config().auth)
    finally:
        db_service.dispose()


if __name__ == "__main__":
    init_db()

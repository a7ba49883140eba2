from sqlalchemy import func
from sqlmodel import Session, select

from src.luxgold.entities.core.user.entity import User, normalize_email
from src.luxgold.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row)

    def get_by_email(self, email: str) -> User | None:
        row = self._find(email)
        if row is None:
            return None
        return User.model_validate(row)

    def get_credentials(self, email: str) -> tuple[User, str] | None:
        """Return the user and stored password hash for a login attempt."""
        row = self._find(email)
        if row is None:
            return None
        return User.model_validate(row), row.password_hash

    def count(self) -> int:
        return self._session.exec(select(func.count()).select_from(UserTable)).one()

    def create(self, user: User, password_hash: str) -> User:
        row = UserTable(**user.model_dump(), password_hash=password_hash)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row)

    def _find(self, email: str) -> UserTable | None:
        statement = select(UserTable).where(UserTable.email == normalize_email(email))
        return self._session.exec(statement).first()

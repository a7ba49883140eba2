"""User database table model."""

from sqlmodel import Field

from src.luxgold.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "user_account"

    email: str = Field(index=True, unique=True)
    name: str | None = None
    role: str = Field(default="CUSTOMER")
    password_hash: str

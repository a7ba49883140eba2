"""User domain entity."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.luxgold.entities._base import Entity

UserRole = Literal["ADMIN", "MANAGER", "CUSTOMER"]

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def normalize_email(value: str) -> str:
    return value.strip().lower()


class User(Entity):
    """A person who can sign in. The password hash never leaves the table model."""

    email: str = Field(pattern=_EMAIL_PATTERN, description="Login email, unique, lower-case")
    name: str | None = Field(default=None, description="Display name")
    role: UserRole = Field(default="CUSTOMER", description="Access level")


class UserCreate(BaseModel):
    email: str = Field(pattern=_EMAIL_PATTERN)
    name: str | None = None
    role: UserRole = "CUSTOMER"
    # bcrypt only looks at the first 72 bytes
    password: str = Field(min_length=8, max_length=72)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, value: object) -> object:
        return normalize_email(value) if isinstance(value, str) else value

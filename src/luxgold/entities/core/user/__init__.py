"""Entity package: User."""

from .entity import User, UserCreate, UserRole
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserCreate", "UserRole", "UserRepository", "UserTable"]

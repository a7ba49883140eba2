"""Entity package: Category."""

from .entity import Category, CategoryCreate, CategoryUpdate
from .repository import CategoryRepository
from .table import CategoryTable

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryRepository",
    "CategoryTable",
]

"""Entity package: Product."""

from .entity import CategoryRef, Product, ProductCreate, ProductPage, ProductUpdate
from .repository import ProductRepository
from .table import ProductTable

__all__ = [
    "CategoryRef",
    "Product",
    "ProductCreate",
    "ProductPage",
    "ProductUpdate",
    "ProductRepository",
    "ProductTable",
]

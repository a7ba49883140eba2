"""Entity package: Attribute."""

from .entity import (
    Attribute,
    AttributeCreate,
    AttributeUpdate,
    AttributeValue,
    AttributeValueCreate,
    ProductAttribute,
    ProductAttributeAttach,
)
from .repository import AttributeRepository
from .table import AttributeTable, AttributeValueTable

__all__ = [
    "Attribute",
    "AttributeCreate",
    "AttributeUpdate",
    "AttributeValue",
    "AttributeValueCreate",
    "ProductAttribute",
    "ProductAttributeAttach",
    "AttributeRepository",
    "AttributeTable",
    "AttributeValueTable",
]

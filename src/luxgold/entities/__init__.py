"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .catalog.attribute import Attribute, AttributeRepository, AttributeTable, AttributeValueTable
from .catalog.category import Category, CategoryRepository, CategoryTable
from .catalog.links import ProductAttributeLink, ProductCategoryLink
from .catalog.product import Product, ProductRepository, ProductTable
from .catalog.variation import Variation, VariationOptionTable, VariationRepository, VariationTable
from .core.user import User, UserRepository, UserTable
from .sales.coupon import Coupon, CouponRepository, CouponTable
from .sales.order import Order, OrderRepository, OrderTable

__all__ = [
    "Attribute",
    "AttributeRepository",
    "AttributeTable",
    "AttributeValueTable",
    "Category",
    "CategoryRepository",
    "CategoryTable",
    "Coupon",
    "CouponRepository",
    "CouponTable",
    "Order",
    "OrderRepository",
    "OrderTable",
    "Product",
    "ProductAttributeLink",
    "ProductCategoryLink",
    "ProductRepository",
    "ProductTable",
    "User",
    "UserRepository",
    "UserTable",
    "Variation",
    "VariationOptionTable",
    "VariationRepository",
    "VariationTable",
]

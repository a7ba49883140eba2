"""Entity package: Order."""

from .entity import Order, OrderCreate, OrderStatusUpdate
from .repository import OrderRepository
from .table import OrderTable

__all__ = ["Order", "OrderCreate", "OrderStatusUpdate", "OrderRepository", "OrderTable"]

"""Order domain entity."""

from typing import Literal

from pydantic import BaseModel, Field

from src.luxgold.entities._base import Entity

OrderStatus = Literal["PENDING", "PROCESSING", "COMPLETED", "CANCELLED", "REFUNDED"]

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Order(Entity):
    """An order recorded from the admin area. Amounts are in toman."""

    number: str = Field(min_length=3, description="Human readable order number, unique")
    customer_name: str = Field(min_length=1)
    customer_email: str = Field(pattern=_EMAIL_PATTERN)
    status: OrderStatus = "PENDING"
    subtotal: float
    discount: float = 0
    shipping: float = 0
    tax: float = 0
    total: float


class OrderCreate(BaseModel):
    number: str = Field(min_length=3)
    customer_name: str = Field(min_length=1)
    customer_email: str = Field(pattern=_EMAIL_PATTERN)
    status: OrderStatus = "PENDING"
    subtotal: float
    discount: float = 0
    shipping: float = 0
    tax: float = 0
    total: float


class OrderStatusUpdate(BaseModel):
    status: OrderStatus

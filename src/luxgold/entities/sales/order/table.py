"""Order database table model."""

from sqlmodel import Field

from src.luxgold.entities._base import EntityTable


class OrderTable(EntityTable, table=True):
    """Database persistence model for orders."""

    __tablename__ = "orders"

    number: str = Field(index=True, unique=True)
    customer_name: str
    customer_email: str = Field(index=True)
    status: str = Field(default="PENDING", index=True)
    subtotal: float
    discount: float = 0
    shipping: float = 0
    tax: float = 0
    total: float

"""Product database table model."""

from sqlmodel import Field, Relationship

from src.luxgold.entities._base import EntityTable
from src.luxgold.entities.catalog.category.table import CategoryTable
from src.luxgold.entities.catalog.links import ProductCategoryLink


class ProductTable(EntityTable, table=True):
    """Database persistence model for products."""

    __tablename__ = "product"

    name: str
    slug: str = Field(index=True, unique=True)
    description: str | None = None
    price: float | None = None
    sku: str | None = Field(default=None, index=True)
    stock: int | None = None
    status: str = Field(default="DRAFT", index=True)
    visibility: str = Field(default="PUBLIC")

    categories: list[CategoryTable] = Relationship(
        link_model=ProductCategoryLink,
        sa_relationship_kwargs={"lazy": "selectin", "order_by": CategoryTable.name},
    )

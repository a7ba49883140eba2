"""Variation database table models."""

from sqlmodel import Field, Relationship, SQLModel

from src.luxgold.entities._base import EntityTable


class VariationOptionTable(SQLModel, table=True):
    """The value a variation takes for one attribute."""

    __tablename__ = "variation_option"

    variation_id: str = Field(foreign_key="variation.id", primary_key=True)
    attribute_id: str = Field(foreign_key="attribute.id", primary_key=True)
    attribute_value_id: str = Field(foreign_key="attribute_value.id", index=True)


class VariationTable(EntityTable, table=True):
    """Database persistence model for product variations."""

    __tablename__ = "variation"

    product_id: str = Field(foreign_key="product.id", index=True)
    sku: str | None = Field(default=None, index=True)
    price: float | None = None
    sale_price: float | None = None
    stock: int = 0
    active: bool = True

    options: list[VariationOptionTable] = Relationship(
        sa_relationship_kwargs={
            "lazy": "selectin",
            "order_by": VariationOptionTable.attribute_id,
            "cascade": "all, delete-orphan",
        },
    )

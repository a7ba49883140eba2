"""Attribute database table models."""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship

from src.luxgold.entities._base import EntityTable


class AttributeValueTable(EntityTable, table=True):
    """Database persistence model for attribute values."""

    __tablename__ = "attribute_value"
    __table_args__ = (UniqueConstraint("attribute_id", "slug"),)

    attribute_id: str = Field(foreign_key="attribute.id", index=True)
    value: str
    slug: str


class AttributeTable(EntityTable, table=True):
    """Database persistence model for attributes."""

    __tablename__ = "attribute"

    name: str
    slug: str = Field(index=True, unique=True)

    values: list[AttributeValueTable] = Relationship(
        sa_relationship_kwargs={
            "lazy": "selectin",
            "order_by": AttributeValueTable.value,
            "cascade": "all, delete-orphan",
        },
    )

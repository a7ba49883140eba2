"""Attribute domain entities.

Attributes (metal, size, stone...) describe products; their values are the
choices a variation is built from.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.luxgold.entities._base import Entity


class AttributeValue(Entity):
    attribute_id: str
    value: str = Field(min_length=1, description="Display value, e.g. 18K")
    slug: str = Field(min_length=1, description="Unique within the attribute")


class Attribute(Entity):
    name: str = Field(min_length=2)
    slug: str = Field(min_length=2, description="URL slug, unique")
    values: list[AttributeValue] = Field(default_factory=list)


class AttributeCreate(BaseModel):
    name: str = Field(min_length=2)
    slug: str = Field(min_length=2)


class AttributeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2)
    slug: str | None = Field(default=None, min_length=2)


class AttributeValueCreate(BaseModel):
    value: str = Field(min_length=1)
    slug: str = Field(min_length=1)


class ProductAttribute(BaseModel):
    """An attribute as attached to one product."""

    model_config = ConfigDict(from_attributes=True)

    product_id: str
    attribute_id: str
    use_for_variations: bool = False
    attribute: Attribute | None = None


class ProductAttributeAttach(BaseModel):
    attribute_id: str
    use_for_variations: bool = False

"""Variation domain entities."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.luxgold.entities._base import Entity


class VariationOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    attribute_id: str
    attribute_value_id: str


class Variation(Entity):
    """A sellable combination of attribute values of one product.

    ``price`` overrides the product price when set; ``sale_price`` is the
    discounted price shown alongside it.
    """

    product_id: str
    sku: str | None = None
    price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    active: bool = True
    options: list[VariationOption] = Field(default_factory=list)


class VariationCreate(BaseModel):
    sku: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    active: bool = True
    options: list[VariationOption] = Field(min_length=1)

    @model_validator(mode="after")
    def one_value_per_attribute(self) -> Self:
        attribute_ids = [option.attribute_id for option in self.options]
        if len(set(attribute_ids)) != len(attribute_ids):
            raise ValueError("Each attribute can appear only once in a variation")
        return self


class VariationUpdate(BaseModel):
    sku: str | None = None
    price: float | None = Field(default=None, ge=0)
    sale_price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    active: bool | None = None

"""Category domain entity."""

from pydantic import BaseModel, Field

from src.luxgold.entities._base import Entity


class Category(Entity):
    """A catalog category such as rings or necklaces."""

    name: str = Field(min_length=2, description="Display name")
    slug: str = Field(min_length=2, description="URL slug, unique")
    description: str | None = Field(default=None, description="Optional description")
    parent_id: str | None = Field(default=None, description="Parent category id")
    product_count: int | None = Field(
        default=None, description="Number of products, when listed with counts"
    )


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2)
    slug: str = Field(min_length=2)
    description: str | None = None
    parent_id: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2)
    slug: str | None = Field(default=None, min_length=2)
    description: str | None = None
    parent_id: str | None = None

"""Entity: Product."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.luxgold.entities._base import Entity

ProductStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]
ProductVisibility = Literal["PUBLIC", "PRIVATE"]


class CategoryRef(BaseModel):
    """The part of a category embedded in a product."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    name: str


class Product(Entity):
    """A piece of jewelry in the catalog.

    Only products that are both ``PUBLISHED`` and ``PUBLIC`` appear in the
    storefront; everything else is visible to the admin API only.
    """

    name: str = Field(min_length=2, description="Product name")
    slug: str = Field(min_length=2, description="URL slug, unique")
    description: str | None = Field(default=None)
    price: float | None = Field(default=None, ge=0, description="Price in toman")
    sku: str | None = Field(default=None, description="Stock keeping unit")
    stock: int | None = Field(default=None, ge=0)
    status: ProductStatus = Field(default="DRAFT")
    visibility: ProductVisibility = Field(default="PUBLIC")
    categories: list[CategoryRef] = Field(default_factory=list)

    @property
    def is_listed(self) -> bool:
        return self.status == "PUBLISHED" and self.visibility == "PUBLIC"


class ProductCreate(BaseModel):
    name: str = Field(min_length=2)
    slug: str = Field(min_length=2)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    sku: str | None = None
    stock: int | None = Field(default=None, ge=0)
    status: ProductStatus = "DRAFT"
    visibility: ProductVisibility = "PUBLIC"
    category_slugs: list[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2)
    slug: str | None = Field(default=None, min_length=2)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    sku: str | None = None
    stock: int | None = Field(default=None, ge=0)
    status: ProductStatus | None = None
    visibility: ProductVisibility | None = None
    category_slugs: list[str] | None = None


class ProductPage(BaseModel):
    """One page of a product listing."""

    items: list[Product]
    page: int
    per_page: int
    total: int

"""Association tables shared by catalog entities."""

from sqlmodel import Field, SQLModel


class ProductCategoryLink(SQLModel, table=True):
    """Many-to-many link between products and categories."""

    __tablename__ = "product_category"

    product_id: str = Field(foreign_key="product.id", primary_key=True)
    category_id: str = Field(foreign_key="category.id", primary_key=True)


class ProductAttributeLink(SQLModel, table=True):
    """An attribute attached to a product, optionally used to build variations."""

    __tablename__ = "product_attribute"

    product_id: str = Field(foreign_key="product.id", primary_key=True)
    attribute_id: str = Field(foreign_key="attribute.id", primary_key=True)
    use_for_variations: bool = False

"""Category database table model."""

from sqlmodel import Field

from src.luxgold.entities._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Database persistence model for categories."""

    __tablename__ = "category"

    name: str
    slug: str = Field(index=True, unique=True)
    description: str | None = None
    parent_id: str | None = Field(default=None, foreign_key="category.id")

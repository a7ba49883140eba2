from sqlalchemy import func
from sqlmodel import Session, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.catalog.category.entity import (
    Category,
    CategoryCreate,
    CategoryUpdate,
)
from src.luxgold.entities.catalog.category.table import CategoryTable
from src.luxgold.entities.catalog.links import ProductCategoryLink


class CategoryRepository:
    """Data-access layer for categories."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, category_id: str) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None
        return Category.model_validate(row)

    def get_by_slug(self, slug: str) -> Category | None:
        statement = select(CategoryTable).where(CategoryTable.slug == slug)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Category.model_validate(row)

    def list_all(self) -> list[Category]:
        statement = select(CategoryTable).order_by(CategoryTable.name)
        return [Category.model_validate(row) for row in self._session.exec(statement)]

    def list_with_counts(self) -> list[Category]:
        """List categories by name, each with its number of linked products."""
        statement = (
            select(CategoryTable, func.count(ProductCategoryLink.product_id))
            .outerjoin(
                ProductCategoryLink,
                ProductCategoryLink.category_id == CategoryTable.id,
            )
            .group_by(CategoryTable.id)
            .order_by(CategoryTable.name)
        )
        return [
            Category.model_validate(row).model_copy(update={"product_count": count})
            for row, count in self._session.exec(statement)
        ]

    def create(self, data: CategoryCreate) -> Category:
        row = CategoryTable(**data.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Category.model_validate(row)

    def update(self, category_id: str, data: CategoryUpdate) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        if changes.get("parent_id") == category_id:
            raise ValueError("A category cannot be its own parent")
        for field, value in changes.items():
            if value is None and field in ("name", "slug"):
                continue
            setattr(row, field, value)
        row.updated_at = utcnow()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Category.model_validate(row)

    def delete(self, category_id: str) -> bool:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return False
        for link in self._session.exec(
            select(ProductCategoryLink).where(ProductCategoryLink.category_id == category_id)
        ).all():
            self._session.delete(link)
        for child in self._session.exec(
            select(CategoryTable).where(CategoryTable.parent_id == category_id)
        ).all():
            child.parent_id = None
            self._session.add(child)
        self._session.delete(row)
        self._session.flush()
        return True

from sqlalchemy import ColumnElement, func, or_
from sqlmodel import Session, col, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.catalog.attribute.repository import AttributeRepository
from src.luxgold.entities.catalog.category.table import CategoryTable
from src.luxgold.entities.catalog.product.entity import (
    Product,
    ProductCreate,
    ProductUpdate,
)
from src.luxgold.entities.catalog.product.table import ProductTable
from src.luxgold.entities.catalog.variation.repository import VariationRepository


def _listed() -> list[ColumnElement[bool]]:
    """Filters for products visible in the storefront."""
    return [ProductTable.status == "PUBLISHED", ProductTable.visibility == "PUBLIC"]


def _in_category(category_slug: str) -> ColumnElement[bool]:
    return ProductTable.categories.any(CategoryTable.slug == category_slug)


def _matches(q: str) -> ColumnElement[bool]:
    return or_(
        col(ProductTable.name).contains(q, autoescape=True),
        col(ProductTable.slug).contains(q, autoescape=True),
        col(ProductTable.sku).contains(q, autoescape=True),
        ProductTable.categories.any(col(CategoryTable.name).contains(q, autoescape=True)),
    )


_NULLABLE_FIELDS = {"description", "price", "sku", "stock"}


class ProductRepository:
    """Data-access layer for products."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row)

    def get_by_slug(self, slug: str, listed_only: bool = False) -> Product | None:
        statement = select(ProductTable).where(ProductTable.slug == slug)
        if listed_only:
            statement = statement.where(*_listed())
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Product.model_validate(row)

    def list_listed(
        self, category_slug: str | None = None, limit: int = 60, offset: int = 0
    ) -> list[Product]:
        """Newest published, public products, optionally in one category."""
        statement = select(ProductTable).where(*_listed())
        if category_slug:
            statement = statement.where(_in_category(category_slug))
        statement = (
            statement.order_by(col(ProductTable.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return [Product.model_validate(row) for row in self._session.exec(statement)]

    def count_listed(self, category_slug: str | None = None) -> int:
        statement = select(func.count()).select_from(ProductTable).where(*_listed())
        if category_slug:
            statement = statement.where(_in_category(category_slug))
        return self._session.exec(statement).one()

    def search_listed(self, q: str, limit: int = 20) -> list[Product]:
        """Listed products whose name, slug or category name contains ``q``."""
        statement = (
            select(ProductTable)
            .where(*_listed())
            .where(
                or_(
                    col(ProductTable.name).contains(q, autoescape=True),
                    col(ProductTable.slug).contains(q, autoescape=True),
                    ProductTable.categories.any(col(CategoryTable.name).contains(q, autoescape=True)),
                )
            )
            .order_by(col(ProductTable.created_at).desc())
            .limit(limit)
        )
        return [Product.model_validate(row) for row in self._session.exec(statement)]

    def list_all(self, q: str | None = None, limit: int = 20, offset: int = 0) -> list[Product]:
        statement = select(ProductTable)
        if q:
            statement = statement.where(_matches(q))
        statement = (
            statement.order_by(col(ProductTable.created_at).desc())
            .offset(offset)
            .limit(limit)
        )
        return [Product.model_validate(row) for row in self._session.exec(statement)]

    def count_all(self, q: str | None = None) -> int:
        statement = select(func.count()).select_from(ProductTable)
        if q:
            statement = statement.where(_matches(q))
        return self._session.exec(statement).one()

    def _resolve_categories(self, slugs: list[str]) -> list[CategoryTable]:
        if not slugs:
            return []
        unique_slugs = list(dict.fromkeys(slugs))
        rows = self._session.exec(
            select(CategoryTable).where(col(CategoryTable.slug).in_(unique_slugs))
        ).all()
        missing = set(unique_slugs) - {row.slug for row in rows}
        if missing:
            raise ValueError(f"Unknown category slug(s): {', '.join(sorted(missing))}")
        return list(rows)

    def create(self, data: ProductCreate) -> Product:
        row = ProductTable(**data.model_dump(exclude={"category_slugs"}))
        row.categories = self._resolve_categories(data.category_slugs)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row)

    def update(self, product_id: str, data: ProductUpdate) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None

        changes = data.model_dump(exclude_unset=True, exclude={"category_slugs"})
        for field, value in changes.items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            setattr(row, field, value)
        if data.category_slugs is not None:
            row.categories = self._resolve_categories(data.category_slugs)
        row.updated_at = utcnow()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row)

    def delete(self, product_id: str) -> bool:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return False
        row.categories = []
        VariationRepository(self._session).delete_for_product(product_id)
        AttributeRepository(self._session).detach_all(product_id)
        self._session.delete(row)
        self._session.flush()
        return True

from sqlmodel import Session, col, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.catalog.attribute.table import AttributeValueTable
from src.luxgold.entities.catalog.variation.entity import (
    Variation,
    VariationCreate,
    VariationOption,
    VariationUpdate,
)
from src.luxgold.entities.catalog.variation.table import VariationOptionTable, VariationTable

_NULLABLE_FIELDS = {"sku", "price", "sale_price"}


class VariationRepository:
    """Data-access layer for product variations."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, variation_id: str) -> Variation | None:
        row = self._session.get(VariationTable, variation_id)
        if row is None:
            return None
        return Variation.model_validate(row)

    def list_for_product(self, product_id: str) -> list[Variation]:
        statement = (
            select(VariationTable)
            .where(VariationTable.product_id == product_id)
            .order_by(col(VariationTable.created_at))
        )
        return [Variation.model_validate(row) for row in self._session.exec(statement)]

    def create(self, product_id: str, data: VariationCreate) -> Variation:
        """Create a variation of ``product_id``.

        Raises:
            ValueError: If an option names a value of a different (or no) attribute
        """
        self._check_options(data.options)
        row = VariationTable(product_id=product_id, **data.model_dump(exclude={"options"}))
        row.options = [
            VariationOptionTable(
                attribute_id=option.attribute_id,
                attribute_value_id=option.attribute_value_id,
            )
            for option in data.options
        ]
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Variation.model_validate(row)

    def update(self, variation_id: str, data: VariationUpdate) -> Variation | None:
        row = self._session.get(VariationTable, variation_id)
        if row is None:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            setattr(row, field, value)
        row.updated_at = utcnow()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Variation.model_validate(row)

    def delete(self, variation_id: str) -> bool:
        row = self._session.get(VariationTable, variation_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def delete_for_product(self, product_id: str) -> int:
        rows = self._session.exec(
            select(VariationTable).where(VariationTable.product_id == product_id)
        ).all()
        for row in rows:
            self._session.delete(row)
        self._session.flush()
        return len(rows)

    def _check_options(self, options: list[VariationOption]) -> None:
        value_ids = [option.attribute_value_id for option in options]
        rows = self._session.exec(
            select(AttributeValueTable).where(col(AttributeValueTable.id).in_(value_ids))
        ).all()
        owners = {row.id: row.attribute_id for row in rows}
        for option in options:
            owner = owners.get(option.attribute_value_id)
            if owner is None:
                raise ValueError(f"Unknown attribute value {option.attribute_value_id!r}")
            if owner != option.attribute_id:
                raise ValueError(
                    f"Attribute value {option.attribute_value_id!r} does not belong "
                    f"to attribute {option.attribute_id!r}"
                )

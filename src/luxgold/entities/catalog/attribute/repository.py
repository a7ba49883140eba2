from sqlalchemy import ColumnElement
from sqlmodel import Session, col, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.catalog.attribute.entity import (
    Attribute,
    AttributeCreate,
    AttributeUpdate,
    AttributeValue,
    AttributeValueCreate,
    ProductAttribute,
)
from src.luxgold.entities.catalog.attribute.table import AttributeTable, AttributeValueTable
from src.luxgold.entities.catalog.links import ProductAttributeLink
from src.luxgold.entities.catalog.variation.table import VariationOptionTable


class AttributeRepository:
    """Data-access layer for attributes, their values and product attachments."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, attribute_id: str) -> Attribute | None:
        row = self._session.get(AttributeTable, attribute_id)
        if row is None:
            return None
        return Attribute.model_validate(row)

    def list_all(self) -> list[Attribute]:
        statement = select(AttributeTable).order_by(AttributeTable.name)
        return [Attribute.model_validate(row) for row in self._session.exec(statement)]

    def create(self, data: AttributeCreate) -> Attribute:
        row = AttributeTable(**data.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Attribute.model_validate(row)

    def update(self, attribute_id: str, data: AttributeUpdate) -> Attribute | None:
        row = self._session.get(AttributeTable, attribute_id)
        if row is None:
            return None
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)
        row.updated_at = utcnow()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Attribute.model_validate(row)

    def delete(self, attribute_id: str) -> bool:
        """Delete an attribute with its values and product attachments.

        Raises:
            ValueError: If a variation still uses the attribute
        """
        row = self._session.get(AttributeTable, attribute_id)
        if row is None:
            return False
        if self._in_use(VariationOptionTable.attribute_id == attribute_id):
            raise ValueError("Attribute is used by product variations")
        for link in self._session.exec(
            select(ProductAttributeLink).where(ProductAttributeLink.attribute_id == attribute_id)
        ).all():
            self._session.delete(link)
        self._session.delete(row)
        self._session.flush()
        return True

    def add_value(self, attribute_id: str, data: AttributeValueCreate) -> AttributeValue | None:
        attribute = self._session.get(AttributeTable, attribute_id)
        if attribute is None:
            return None
        row = AttributeValueTable(attribute_id=attribute_id, **data.model_dump())
        attribute.values.append(row)
        self._session.flush()
        self._session.refresh(row)
        return AttributeValue.model_validate(row)

    def delete_value(self, attribute_id: str, value_id: str) -> bool:
        """Delete one value of an attribute.

        Raises:
            ValueError: If a variation still uses the value
        """
        row = self._session.get(AttributeValueTable, value_id)
        if row is None or row.attribute_id != attribute_id:
            return False
        if self._in_use(VariationOptionTable.attribute_value_id == value_id):
            raise ValueError("Attribute value is used by product variations")
        self._session.delete(row)
        self._session.flush()
        return True

    def list_for_product(self, product_id: str) -> list[ProductAttribute]:
        statement = (
            select(ProductAttributeLink, AttributeTable)
            .join(AttributeTable, col(AttributeTable.id) == ProductAttributeLink.attribute_id)
            .where(ProductAttributeLink.product_id == product_id)
            .order_by(AttributeTable.name)
        )
        return [
            ProductAttribute(
                product_id=link.product_id,
                attribute_id=link.attribute_id,
                use_for_variations=link.use_for_variations,
                attribute=Attribute.model_validate(attribute),
            )
            for link, attribute in self._session.exec(statement)
        ]

    def attach(
        self, product_id: str, attribute_id: str, use_for_variations: bool = False
    ) -> ProductAttribute:
        """Attach an attribute to a product, or update an existing attachment.

        Raises:
            ValueError: If the attribute does not exist
        """
        attribute = self._session.get(AttributeTable, attribute_id)
        if attribute is None:
            raise ValueError(f"Unknown attribute {attribute_id!r}")

        link = self._session.get(ProductAttributeLink, (product_id, attribute_id))
        if link is None:
            link = ProductAttributeLink(product_id=product_id, attribute_id=attribute_id)
        link.use_for_variations = use_for_variations
        self._session.add(link)
        self._session.flush()
        return ProductAttribute(
            product_id=product_id,
            attribute_id=attribute_id,
            use_for_variations=use_for_variations,
            attribute=Attribute.model_validate(attribute),
        )

    def detach(self, product_id: str, attribute_id: str) -> bool:
        link = self._session.get(ProductAttributeLink, (product_id, attribute_id))
        if link is None:
            return False
        self._session.delete(link)
        self._session.flush()
        return True

    def detach_all(self, product_id: str) -> None:
        for link in self._session.exec(
            select(ProductAttributeLink).where(ProductAttributeLink.product_id == product_id)
        ).all():
            self._session.delete(link)
        self._session.flush()

    def _in_use(self, condition: ColumnElement[bool]) -> bool:
        return self._session.exec(select(VariationOptionTable).where(condition)).first() is not None

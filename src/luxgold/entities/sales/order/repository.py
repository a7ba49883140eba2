from sqlmodel import Session, col, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.sales.order.entity import Order, OrderCreate, OrderStatus
from src.luxgold.entities.sales.order.table import OrderTable


class OrderRepository:
    """Data-access layer for orders."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, order_id: str) -> Order | None:
        row = self._session.get(OrderTable, order_id)
        if row is None:
            return None
        return Order.model_validate(row)

    def get_by_number(self, number: str) -> Order | None:
        row = self._session.exec(select(OrderTable).where(OrderTable.number == number)).first()
        if row is None:
            return None
        return Order.model_validate(row)

    def list_recent(self, limit: int = 100, status: OrderStatus | None = None) -> list[Order]:
        statement = select(OrderTable)
        if status is not None:
            statement = statement.where(OrderTable.status == status)
        statement = statement.order_by(col(OrderTable.created_at).desc()).limit(limit)
        return [Order.model_validate(row) for row in self._session.exec(statement)]

    def create(self, data: OrderCreate) -> Order:
        row = OrderTable(**data.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Order.model_validate(row)

    def set_status(self, order_id: str, status: OrderStatus) -> Order | None:
        row = self._session.get(OrderTable, order_id)
        if row is None:
            return None
        row.status = status
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Order.model_validate(row)

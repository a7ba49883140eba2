from sqlmodel import Session, col, select

from src.luxgold.entities._base import utcnow
from src.luxgold.entities.sales.coupon.entity import Coupon, CouponCreate, CouponUpdate
from src.luxgold.entities.sales.coupon.table import CouponTable

_NULLABLE_FIELDS = {"min_subtotal", "max_uses", "starts_at", "ends_at"}


class CouponRepository:
    """Data-access layer for coupons."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, coupon_id: str) -> Coupon | None:
        row = self._session.get(CouponTable, coupon_id)
        if row is None:
            return None
        return Coupon.model_validate(row)

    def get_by_code(self, code: str) -> Coupon | None:
        statement = select(CouponTable).where(CouponTable.code == code.strip().upper())
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Coupon.model_validate(row)

    def list_recent(self, limit: int = 100) -> list[Coupon]:
        statement = (
            select(CouponTable).order_by(col(CouponTable.created_at).desc()).limit(limit)
        )
        return [Coupon.model_validate(row) for row in self._session.exec(statement)]

    def create(self, data: CouponCreate) -> Coupon:
        row = CouponTable(**data.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Coupon.model_validate(row)

    def update(self, coupon_id: str, data: CouponUpdate) -> Coupon | None:
        """Apply a partial update.

        Raises:
            ValueError: If the merged coupon is invalid (for example a percent
                coupon above 100 or a window that ends before it starts)
        """
        row = self._session.get(CouponTable, coupon_id)
        if row is None:
            return None

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in _NULLABLE_FIELDS
        }
        current = Coupon.model_validate(row).model_dump()
        Coupon.model_validate({**current, **changes})

        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = utcnow()

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Coupon.model_validate(row)

    def delete(self, coupon_id: str) -> bool:
        row = self._session.get(CouponTable, coupon_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

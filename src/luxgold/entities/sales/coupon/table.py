"""Coupon database table model."""

from datetime import datetime

from sqlmodel import Field

from src.luxgold.entities._base import EntityTable


class CouponTable(EntityTable, table=True):
    """Database persistence model for coupons."""

    __tablename__ = "coupon"

    code: str = Field(index=True, unique=True)
    type: str
    amount: float
    min_subtotal: float | None = None
    max_uses: int | None = None
    used_count: int = 0
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool = True

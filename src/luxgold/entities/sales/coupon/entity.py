"""Coupon domain entity."""

from datetime import UTC, datetime
from typing import Literal, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from src.luxgold.entities._base import Entity

CouponType = Literal["PERCENT", "FIXED"]


def _normalize_code(value: object) -> object:
    return value.strip().upper() if isinstance(value, str) else value


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class CouponRules(BaseModel):
    """Validation shared by every coupon model."""

    @field_validator("code", mode="before", check_fields=False)
    @classmethod
    def normalize_code(cls, value: object) -> object:
        return _normalize_code(value)

    @model_validator(mode="after")
    def check_amount_and_window(self) -> Self:
        coupon_type = getattr(self, "type", None)
        amount = getattr(self, "amount", None)
        if coupon_type == "PERCENT" and amount is not None and amount > 100:
            raise ValueError("Percent coupons cannot exceed 100")

        starts_at = getattr(self, "starts_at", None)
        ends_at = getattr(self, "ends_at", None)
        if starts_at and ends_at and _as_utc(ends_at) <= _as_utc(starts_at):
            raise ValueError("ends_at must be after starts_at")
        return self


class Coupon(CouponRules, Entity):
    """A discount code managed from the admin area."""

    code: str = Field(min_length=2, description="Code entered by customers, upper-case")
    type: CouponType = Field(description="Percentage or fixed amount")
    amount: float = Field(ge=0)
    min_subtotal: float | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1)
    used_count: int = Field(default=0, ge=0)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool = True


class CouponCreate(CouponRules):
    code: str = Field(min_length=2)
    type: CouponType
    amount: float = Field(ge=0)
    min_subtotal: float | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool = True


class CouponUpdate(CouponRules):
    code: str | None = Field(default=None, min_length=2)
    type: CouponType | None = None
    amount: float | None = Field(default=None, ge=0)
    min_subtotal: float | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool | None = None

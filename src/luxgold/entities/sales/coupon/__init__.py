"""Entity package: Coupon."""

from .entity import Coupon, CouponCreate, CouponUpdate
from .repository import CouponRepository
from .table import CouponTable

__all__ = ["Coupon", "CouponCreate", "CouponUpdate", "CouponRepository", "CouponTable"]

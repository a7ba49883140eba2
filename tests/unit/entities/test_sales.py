"""Unit tests for the sales entity packages (coupons and orders)."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from src.luxgold.entities.sales.coupon import CouponCreate, CouponRepository, CouponUpdate
from src.luxgold.entities.sales.order import OrderCreate, OrderRepository


def _order(number: str, **overrides) -> OrderCreate:
    data = {
        "number": number,
        "customer_name": "Sara",
        "customer_email": "sara@example.com",
        "subtotal": 1000,
        "total": 1000,
    }
    data.update(overrides)
    return OrderCreate(**data)


class TestCouponValidation:
    """Test coupon rules enforced by the models."""

    def test_code_is_normalized(self):
        assert CouponCreate(code="  gold10 ", type="PERCENT", amount=10).code == "GOLD10"

    def test_percent_above_100_rejected(self):
        with pytest.raises(ValidationError):
            CouponCreate(code="BIG", type="PERCENT", amount=150)

    def test_fixed_amount_can_exceed_100(self):
        assert CouponCreate(code="FLAT", type="FIXED", amount=500000).amount == 500000

    def test_window_must_be_ordered(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            CouponCreate(code="WIN", type="FIXED", amount=1, starts_at=now, ends_at=now - timedelta(days=1))

    def test_naive_and_aware_datetimes_compare(self):
        start = datetime(2025, 1, 1)
        end = datetime(2025, 2, 1, tzinfo=UTC)
        assert CouponCreate(code="MIX", type="FIXED", amount=1, starts_at=start, ends_at=end).ends_at == end


class TestCouponRepository:
    """Test coupon persistence."""

    def test_create_and_lookup_by_code(self, session):
        repo = CouponRepository(session)
        created = repo.create(CouponCreate(code="gold10", type="PERCENT", amount=10, max_uses=5))
        assert created.code == "GOLD10"
        assert created.used_count == 0
        assert repo.get_by_code("Gold10").id == created.id

    def test_duplicate_code(self, session):
        repo = CouponRepository(session)
        repo.create(CouponCreate(code="GOLD10", type="PERCENT", amount=10))
        with pytest.raises(IntegrityError):
            repo.create(CouponCreate(code="gold10", type="FIXED", amount=10))

    def test_update_validates_merged_coupon(self, session):
        """Switching a large fixed coupon to PERCENT is rejected."""
        repo = CouponRepository(session)
        coupon = repo.create(CouponCreate(code="FLAT", type="FIXED", amount=500))
        with pytest.raises(ValueError):
            repo.update(coupon.id, CouponUpdate(type="PERCENT"))

    def test_update_and_clear_optional_fields(self, session):
        repo = CouponRepository(session)
        coupon = repo.create(CouponCreate(code="LIMITED", type="FIXED", amount=5, max_uses=3))
        updated = repo.update(coupon.id, CouponUpdate(active=False, max_uses=None))
        assert updated.active is False
        assert updated.max_uses is None
        assert updated.amount == 5

    def test_list_and_delete(self, session):
        repo = CouponRepository(session)
        coupon = repo.create(CouponCreate(code="ONE", type="FIXED", amount=1))
        repo.create(CouponCreate(code="TWO", type="FIXED", amount=2))
        assert {c.code for c in repo.list_recent()} == {"ONE", "TWO"}
        assert repo.delete(coupon.id) is True
        assert repo.delete(coupon.id) is False
        assert [c.code for c in repo.list_recent()] == ["TWO"]


class TestOrderRepository:
    """Test order persistence."""

    def test_defaults(self, session):
        order = OrderRepository(session).create(_order("LG-1001"))
        assert order.status == "PENDING"
        assert (order.discount, order.shipping, order.tax) == (0, 0, 0)

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            _order("LG-1001", customer_email="not-an-email")

    def test_duplicate_number(self, session):
        repo = OrderRepository(session)
        repo.create(_order("LG-1001"))
        with pytest.raises(IntegrityError):
            repo.create(_order("LG-1001"))

    def test_status_change(self, session):
        repo = OrderRepository(session)
        order = repo.create(_order("LG-1001"))
        assert repo.set_status(order.id, "COMPLETED").status == "COMPLETED"
        assert repo.get_by_number("LG-1001").status == "COMPLETED"
        assert repo.set_status("missing", "CANCELLED") is None

    def test_filter_by_status(self, session):
        repo = OrderRepository(session)
        repo.create(_order("LG-1001"))
        repo.create(_order("LG-1002", status="REFUNDED"))
        assert [o.number for o in repo.list_recent(status="REFUNDED")] == ["LG-1002"]
        assert len(repo.list_recent()) == 2

"""Tests for the Coupon aggregate and discount arithmetic."""

import json
from datetime import datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from tianguis.promotions.coupon import Coupon, CouponCreated, CouponScope, DiscountType
from tianguis.promotions.validation import calculate_discount


def _coupon(**overrides):
    defaults = {"code": " bienvenida10 ", "name": "Welcome", "discount_type": DiscountType.PERCENTAGE.value, "value": 10}
    defaults.update(overrides)
    return Coupon.create(**defaults)


class TestCouponCreation:
    def test_code_is_uppercased(self):
        coupon = _coupon()
        assert coupon.code == "BIENVENIDA10"
        assert isinstance(coupon._events[-1], CouponCreated)

    @pytest.mark.parametrize("value", [0, 100.01, -5])
    def test_percentage_out_of_range(self, value):
        with pytest.raises(ValidationError):
            _coupon(value=value)

    def test_percentage_of_exactly_100_allowed(self):
        assert _coupon(value=100).value == 100

    def test_fixed_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            _coupon(discount_type=DiscountType.FIXED_AMOUNT.value, value=0)

    def test_free_shipping_needs_no_value(self):
        coupon = _coupon(discount_type=DiscountType.FREE_SHIPPING.value, value=0)
        assert coupon.value == 0

    def test_expiry_must_follow_start(self):
        now = datetime.now()
        with pytest.raises(ValidationError):
            _coupon(starts_at=now, expires_at=now - timedelta(days=1))

    def test_vendor_coupon_restricted_to_issuer(self):
        coupon = _coupon(scope=CouponScope.VENDOR.value, vendor_id="vendor-7", vendor_ids=["vendor-1", "vendor-2"])
        assert coupon.restricted_vendor_ids == ["vendor-7"]
        assert json.loads(coupon.vendor_ids) == ["vendor-7"]

    def test_vendor_coupon_requires_vendor(self):
        with pytest.raises(ValidationError):
            _coupon(scope=CouponScope.VENDOR.value)


class TestCalculateDiscount:
    def test_percentage_of_eligible_total(self):
        assert calculate_discount(_coupon(value=15), 333.33) == 50.0

    def test_percentage_capped(self):
        assert calculate_discount(_coupon(value=50, maximum_discount_amount=100), 1000) == 100

    def test_fixed_never_exceeds_eligible_total(self):
        coupon = _coupon(discount_type=DiscountType.FIXED_AMOUNT.value, value=200)
        assert calculate_discount(coupon, 150) == 150
        assert calculate_discount(coupon, 500) == 200

    def test_free_shipping_has_no_amount(self):
        coupon = _coupon(discount_type=DiscountType.FREE_SHIPPING.value, value=0)
        assert calculate_discount(coupon, 500) == 0

"""Application tests for coupon validation rules and their ordering."""

from datetime import datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from tianguis.ordering.cart import PricedLine
from tianguis.promotions.coupon import Coupon, CouponRedemption, DiscountType
from tianguis.promotions.management import CreateCoupon, DeactivateCoupon
from tianguis.promotions.validation import CANNOT_COMBINE, validate_coupon


def _line(vendor_id="vendor-a", price=100.0, quantity=1, product_id=None, category_id="cat-1"):
    return PricedLine(
        product_id=product_id or f"prod-{vendor_id}-{price}",
        vendor_id=vendor_id,
        category_id=category_id,
        name="Producto",
        unit_price=price,
        quantity=quantity,
    )


def _create(code="PROMO", **overrides):
    defaults = {"code": code, "name": "Promo", "discount_type": DiscountType.PERCENTAGE.value, "value": 10}
    defaults.update(overrides)
    coupon_id = current_domain.process(CreateCoupon(**defaults), asynchronous=False)
    return current_domain.repository_for(Coupon).get(coupon_id)


def _message(exc_info):
    return exc_info.value.messages["coupon_code"][0]


class TestValidationOrder:
    def test_different_applied_code_cannot_combine(self):
        _create()
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()], applied_code="OTHER")
        assert _message(exc) == CANNOT_COMBINE

    def test_reapplying_same_code_is_allowed(self):
        _create()
        quote = validate_coupon("promo", [_line()], applied_code="PROMO")
        assert quote.code == "PROMO"

    def test_unknown_code(self):
        with pytest.raises(ValidationError) as exc:
            validate_coupon("NOPE", [_line()])
        assert _message(exc) == "Invalid coupon code"

    def test_inactive_code(self):
        _create()
        current_domain.process(DeactivateCoupon(code="PROMO"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()])
        assert _message(exc) == "Invalid coupon code"

    def test_not_started(self):
        _create(starts_at=datetime.now() + timedelta(days=2))
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()])
        assert "not yet valid" in _message(exc)

    def test_expired(self):
        now = datetime.now()
        _create(starts_at=now - timedelta(days=10), expires_at=now - timedelta(days=1))
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()])
        assert "expired" in _message(exc)

    def test_usage_limit_reached(self):
        coupon = _create(usage_limit=1)
        coupon.record_use()
        current_domain.repository_for(Coupon).add(coupon)
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()])
        assert "usage limit" in _message(exc)

    def test_per_customer_limit_counts_by_email(self):
        coupon = _create()
        current_domain.repository_for(CouponRedemption).add(
            CouponRedemption(coupon_id=coupon.id, code="PROMO", checkout_id="chk-1", customer_email="ana@example.mx")
        )
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()], customer_email="ANA@example.mx")
        assert "already used" in _message(exc)

        assert validate_coupon("PROMO", [_line()], customer_email="luis@example.mx").code == "PROMO"

    def test_per_customer_limit_holds_on_a_busy_coupon(self):
        coupon = _create()
        repo = current_domain.repository_for(CouponRedemption)
        for index in range(120):
            repo.add(
                CouponRedemption(
                    coupon_id=coupon.id,
                    code="PROMO",
                    checkout_id=f"chk-{index}",
                    customer_email=f"buyer{index}@example.mx",
                )
            )
        repo.add(CouponRedemption(coupon_id=coupon.id, code="PROMO", checkout_id="chk-ana", customer_email="ana@example.mx"))

        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()], customer_email="ana@example.mx")
        assert "already used" in _message(exc)

    def test_per_customer_limit_counts_by_customer_id(self):
        coupon = _create(per_customer_limit=2)
        repo = current_domain.repository_for(CouponRedemption)
        for index in range(2):
            repo.add(
                CouponRedemption(
                    coupon_id=coupon.id,
                    code="PROMO",
                    checkout_id=f"chk-{index}",
                    customer_id="cust-1",
                    customer_email=f"old{index}@example.mx",
                )
            )
        with pytest.raises(ValidationError):
            validate_coupon("PROMO", [_line()], customer_id="cust-1", customer_email="new@example.mx")
        assert validate_coupon("PROMO", [_line()], customer_id="cust-2").code == "PROMO"


class TestMinimumPurchase:
    def test_subtotal_below_minimum_rejected(self):
        _create(minimum_order_amount=500)
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line(price=499.99)])
        assert "Minimum order amount of $500.00" in _message(exc)

    def test_subtotal_at_minimum_accepted(self):
        _create(minimum_order_amount=500)
        quote = validate_coupon("PROMO", [_line(price=250.0, quantity=2)])
        assert quote.discount_amount == 50.0


class TestRestrictions:
    def test_vendor_restriction_limits_eligible_subtotal(self):
        _create(vendor_ids='["vendor-a"]')
        quote = validate_coupon("PROMO", [_line("vendor-a", 300.0), _line("vendor-b", 700.0)])
        assert quote.eligible_subtotals == {"vendor-a": 300.0}
        assert quote.discount_amount == 30.0

    def test_nothing_eligible(self):
        _create(product_ids='["prod-special"]')
        with pytest.raises(ValidationError) as exc:
            validate_coupon("PROMO", [_line()])
        assert _message(exc) == "No items in your cart are eligible for this coupon"

    def test_validation_does_not_consume_the_coupon(self):
        _create(usage_limit=1)
        validate_coupon("PROMO", [_line()])
        validate_coupon("PROMO", [_line()])
        coupon = current_domain.repository_for(Coupon)._dao.query.filter(code="PROMO").all().first
        assert coupon.times_used == 0


class TestCouponManagement:
    def test_duplicate_code_rejected(self):
        _create()
        with pytest.raises(ValidationError):
            _create(code="promo")

    def test_vendor_cannot_deactivate_foreign_coupon(self):
        _create(scope="vendor", vendor_id="vendor-a")
        with pytest.raises(ValidationError):
            current_domain.process(DeactivateCoupon(code="PROMO", vendor_id="vendor-b"), asynchronous=False)

"""Coupon validation and discount calculation.

Validation is read-only: it never changes the coupon or its usage counters.
Usage is recorded later, when the payment for a checkout is confirmed.
"""

from dataclasses import dataclass, field
from datetime import datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from tianguis.identity.account import normalize_email
from tianguis.ordering.cart import PricedLine
from tianguis.ordering.order.order import Order
from tianguis.promotions.coupon import Coupon, CouponRedemption, DiscountType

CANNOT_COMBINE = "Coupons cannot be combined; remove the applied coupon first"


@dataclass(frozen=True)
class CouponQuote:
    coupon_id: str
    code: str
    discount_type: str
    discount_amount: float
    # Eligible merchandise subtotal per vendor group
    eligible_subtotals: dict[str, float] = field(default_factory=dict)

    @property
    def free_shipping(self) -> bool:
        return self.discount_type == DiscountType.FREE_SHIPPING.value

    @property
    def eligible_vendor_ids(self) -> list[str]:
        return list(self.eligible_subtotals)


def _reject(message: str):
    raise ValidationError({"coupon_code": [message]})


def find_coupon(code: str) -> Coupon | None:
    normalized = (code or "").strip().upper()
    if not normalized:
        return None
    return current_domain.repository_for(Coupon)._dao.query.filter(code=normalized).all().first


def _redemptions_by(coupon: Coupon, customer_email: str | None, customer_id: str | None) -> int:
    buyer = Q()
    if customer_id:
        buyer |= Q(customer_id=customer_id)
    if customer_email:
        buyer |= Q(customer_email=customer_email)
    dao = current_domain.repository_for(CouponRedemption)._dao
    return dao.query.filter(buyer, coupon_id=coupon.id).limit(1).all().total


def _has_previous_orders(customer_email: str | None, customer_id: str | None) -> bool:
    dao = current_domain.repository_for(Order)._dao
    if customer_id and dao.query.filter(customer_id=customer_id).all().items:
        return True
    return bool(customer_email and dao.query.filter(customer_email=customer_email).all().items)


def _is_eligible(coupon: Coupon, line: PricedLine) -> bool:
    categories = coupon.restricted_category_ids
    vendors = coupon.restricted_vendor_ids
    products = coupon.restricted_product_ids
    if categories and line.category_id not in categories:
        return False
    if vendors and line.vendor_id not in vendors:
        return False
    if products and line.product_id not in products:
        return False
    return True


def calculate_discount(coupon: Coupon, eligible_total: float) -> float:
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = eligible_total * coupon.value / 100
        if coupon.maximum_discount_amount is not None:
            discount = min(discount, coupon.maximum_discount_amount)
    elif coupon.discount_type == DiscountType.FIXED_AMOUNT.value:
        discount = min(coupon.value, eligible_total)
    else:
        discount = 0.0
    return round(discount, 2)


def validate_coupon(
    code: str,
    lines: list[PricedLine],
    customer_email: str | None = None,
    customer_id: str | None = None,
    applied_code: str | None = None,
    now: datetime | None = None,
) -> CouponQuote:
    """Check ``code`` against the priced cart and return the discount it grants.

    Raises ``ValidationError`` keyed on ``coupon_code`` with a single
    human-readable message for the first rule that fails.
    """
    now = now or datetime.now()
    normalized = (code or "").strip().upper()
    customer_email = normalize_email(customer_email) or None

    if applied_code and applied_code.strip().upper() != normalized:
        _reject(CANNOT_COMBINE)

    coupon = find_coupon(normalized)
    if coupon is None or not coupon.is_active:
        _reject("Invalid coupon code")
    if coupon.starts_at and now < coupon.starts_at:
        _reject("This coupon is not yet valid")
    if coupon.expires_at and now > coupon.expires_at:
        _reject("This coupon has expired")
    if coupon.usage_limit is not None and (coupon.times_used or 0) >= coupon.usage_limit:
        _reject("This coupon has reached its usage limit")

    if customer_email or customer_id:
        if _redemptions_by(coupon, customer_email, customer_id) >= (coupon.per_customer_limit or 1):
            _reject("You have already used this coupon")
        if coupon.first_time_customers_only and _has_previous_orders(customer_email, customer_id):
            _reject("This coupon is only valid for first-time customers")

    subtotal = round(sum(line.line_total for line in lines), 2)
    if coupon.minimum_order_amount and subtotal < coupon.minimum_order_amount:
        _reject(f"Minimum order amount of ${coupon.minimum_order_amount:.2f} required")

    eligible_subtotals: dict[str, float] = {}
    for line in lines:
        if _is_eligible(coupon, line):
            eligible_subtotals[line.vendor_id] = round(eligible_subtotals.get(line.vendor_id, 0.0) + line.line_total, 2)
    if not eligible_subtotals:
        _reject("No items in your cart are eligible for this coupon")

    return CouponQuote(
        coupon_id=str(coupon.id),
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_amount=calculate_discount(coupon, sum(eligible_subtotals.values())),
        eligible_subtotals=eligible_subtotals,
    )

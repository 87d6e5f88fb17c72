"""Coupon aggregate and the CouponRedemption ledger."""

import json
from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from tianguis.domain import tianguis


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


class CouponScope(Enum):
    PLATFORM = "platform"
    VENDOR = "vendor"


def _load_ids(raw) -> list[str]:
    return [str(i) for i in json.loads(raw)] if raw else []


def _dump_ids(ids) -> str | None:
    return json.dumps([str(i) for i in ids]) if ids else None


@tianguis.aggregate
class Coupon:
    code: String(required=True, max_length=50, unique=True)
    name: String(required=True, max_length=150)
    description: Text()
    discount_type: String(required=True, choices=DiscountType)
    value: Float(default=0.0, min_value=0.0)
    minimum_order_amount: Float(min_value=0.0)
    maximum_discount_amount: Float(min_value=0.0)
    usage_limit: Integer(min_value=1)
    times_used: Integer(default=0)
    per_customer_limit: Integer(default=1, min_value=1)
    starts_at: DateTime()
    expires_at: DateTime()
    category_ids: Text()  # JSON list
    vendor_ids: Text()  # JSON list
    product_ids: Text()  # JSON list
    first_time_customers_only: Boolean(default=False)
    is_active: Boolean(default=True)
    scope: String(choices=CouponScope, default=CouponScope.PLATFORM.value)
    vendor_id: Identifier()
    created_by: Identifier()
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def discount_value_matches_type(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and not 0 < (self.value or 0) <= 100:
            raise ValidationError({"value": ["Percentage discounts must be between 0 and 100"]})
        if self.discount_type == DiscountType.FIXED_AMOUNT.value and not (self.value or 0) > 0:
            raise ValidationError({"value": ["Fixed discounts must be greater than zero"]})

    @invariant.post
    def vendor_coupons_name_their_vendor(self):
        if self.scope == CouponScope.VENDOR.value and not self.vendor_id:
            raise ValidationError({"vendor_id": ["Vendor coupons must reference a vendor"]})

    @invariant.post
    def window_must_be_ordered(self):
        if self.starts_at and self.expires_at and self.expires_at <= self.starts_at:
            raise ValidationError({"expires_at": ["Expiry must be after the start date"]})

    @classmethod
    def create(cls, code, name, discount_type, value=0.0, category_ids=None, vendor_ids=None, product_ids=None, **terms):
        if terms.get("scope") == CouponScope.VENDOR.value:
            # Vendor coupons only ever discount the issuing vendor's products
            vendor_ids = [terms.get("vendor_id")]

        coupon = cls(
            code=code.strip().upper(),
            name=name,
            discount_type=discount_type,
            value=value or 0.0,
            category_ids=_dump_ids(category_ids),
            vendor_ids=_dump_ids(vendor_ids),
            product_ids=_dump_ids(product_ids),
            **terms,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=coupon.id,
                code=coupon.code,
                discount_type=coupon.discount_type,
                value=coupon.value,
                scope=coupon.scope,
                vendor_id=coupon.vendor_id,
                created_by=coupon.created_by,
            )
        )
        return coupon

    @property
    def restricted_category_ids(self) -> list[str]:
        return _load_ids(self.category_ids)

    @property
    def restricted_vendor_ids(self) -> list[str]:
        return _load_ids(self.vendor_ids)

    @property
    def restricted_product_ids(self) -> list[str]:
        return _load_ids(self.product_ids)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Coupon is already inactive"]})
        self.is_active = False

    def record_use(self):
        self.times_used = (self.times_used or 0) + 1


@tianguis.event(part_of=Coupon)
class CouponCreated:
    __version__ = 1

    coupon_id: Identifier(required=True)
    code: String(required=True)
    discount_type: String(required=True)
    value: Float()
    scope: String(required=True)
    vendor_id: Identifier()
    created_by: Identifier()


@tianguis.aggregate
class CouponRedemption:
    coupon_id: Identifier(required=True)
    code: String(required=True, max_length=50)
    checkout_id: Identifier(required=True)
    customer_id: Identifier()
    customer_email: String(required=True, max_length=254)
    discount_amount: Float(default=0.0)
    redeemed_at: DateTime(default=datetime.now)

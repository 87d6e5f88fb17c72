"""Coupon creation and retirement — commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.promotions.coupon import Coupon, CouponScope
from tianguis.promotions.validation import find_coupon
from tianguis.utils.query import all_items


@tianguis.command(part_of=Coupon)
class CreateCoupon:
    code = String(required=True, max_length=50)
    name = String(required=True, max_length=150)
    description = Text()
    discount_type = String(required=True)
    value = Float(default=0.0)
    minimum_order_amount = Float()
    maximum_discount_amount = Float()
    usage_limit = Integer()
    per_customer_limit = Integer(default=1)
    starts_at = DateTime()
    expires_at = DateTime()
    category_ids = Text()  # JSON list
    vendor_ids = Text()  # JSON list
    product_ids = Text()  # JSON list
    first_time_customers_only = Boolean(default=False)
    scope = String(default=CouponScope.PLATFORM.value)
    vendor_id = Identifier()
    created_by = Identifier()


@tianguis.command(part_of=Coupon)
class DeactivateCoupon:
    code = String(required=True, max_length=50)
    vendor_id = Identifier()  # Set when a vendor retires one of its own coupons


def _ids(raw):
    return json.loads(raw) if isinstance(raw, str) else raw


@tianguis.command_handler(part_of=Coupon)
class CouponManagementHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        if find_coupon(command.code) is not None:
            raise ValidationError({"code": [f"Coupon code '{command.code.strip().upper()}' already exists"]})

        coupon = Coupon.create(
            code=command.code,
            name=command.name,
            discount_type=command.discount_type,
            value=command.value,
            category_ids=_ids(command.category_ids),
            vendor_ids=_ids(command.vendor_ids),
            product_ids=_ids(command.product_ids),
            description=command.description,
            minimum_order_amount=command.minimum_order_amount,
            maximum_discount_amount=command.maximum_discount_amount,
            usage_limit=command.usage_limit,
            per_customer_limit=command.per_customer_limit or 1,
            starts_at=command.starts_at,
            expires_at=command.expires_at,
            first_time_customers_only=command.first_time_customers_only or False,
            scope=command.scope or CouponScope.PLATFORM.value,
            vendor_id=command.vendor_id,
            created_by=command.created_by,
        )
        current_domain.repository_for(Coupon).add(coupon)
        return str(coupon.id)

    @handle(DeactivateCoupon)
    def deactivate_coupon(self, command):
        coupon = find_coupon(command.code)
        if coupon is None:
            raise ValidationError({"code": ["Invalid coupon code"]})
        if command.vendor_id and str(coupon.vendor_id) != str(command.vendor_id):
            raise ValidationError({"code": ["Coupon does not belong to this vendor"]})

        coupon.deactivate()
        current_domain.repository_for(Coupon).add(coupon)


def list_coupons(vendor_id: str | None = None) -> list[Coupon]:
    dao = current_domain.repository_for(Coupon)._dao
    query = dao.query.filter(vendor_id=vendor_id) if vendor_id else dao.query
    return all_items(query.order_by("-created_at"))

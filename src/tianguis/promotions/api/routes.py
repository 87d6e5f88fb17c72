"""FastAPI endpoints for coupon validation and coupon management."""

import json

from fastapi import APIRouter, Depends
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from tianguis.identity.access import optional_identity, require_admin, require_vendor
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.ordering.cart import parse_cart, resolve_lines
from tianguis.promotions.api.schemas import (
    CouponIdResponse,
    CreateCouponRequest,
    StatusResponse,
    ValidateCouponRequest,
    ValidateCouponResponse,
    coupon_to_dict,
)
from tianguis.promotions.coupon import CouponScope
from tianguis.promotions.management import CreateCoupon, DeactivateCoupon, list_coupons
from tianguis.promotions.validation import validate_coupon

router = APIRouter(prefix="/coupons", tags=["coupons"])
vendor_coupon_router = APIRouter(prefix="/vendor/coupons", tags=["vendor"])
admin_coupon_router = APIRouter(prefix="/admin/coupons", tags=["admin"])


def _first_message(exc: ValidationError) -> str:
    for messages in exc.messages.values():
        if messages:
            return messages[0] if isinstance(messages, list) else str(messages)
    return "Invalid coupon code"


def _create_command(body: CreateCouponRequest, **ownership) -> CreateCoupon:
    return CreateCoupon(
        code=body.code,
        name=body.name,
        description=body.description,
        discount_type=body.discount_type,
        value=body.value,
        minimum_order_amount=body.minimum_order_amount,
        maximum_discount_amount=body.maximum_discount_amount,
        usage_limit=body.usage_limit,
        per_customer_limit=body.per_customer_limit,
        starts_at=body.starts_at,
        expires_at=body.expires_at,
        category_ids=json.dumps(body.category_ids),
        vendor_ids=json.dumps(body.vendor_ids),
        product_ids=json.dumps(body.product_ids),
        first_time_customers_only=body.first_time_customers_only,
        **ownership,
    )


# --- Storefront ---


@router.post("/validate", response_model=ValidateCouponResponse)
async def validate(
    body: ValidateCouponRequest, identity: AuthenticatedIdentity | None = Depends(optional_identity)
) -> ValidateCouponResponse:
    # Rejections are answers, not errors: the cart shows the message inline
    try:
        lines = resolve_lines(parse_cart([item.model_dump() for item in body.items]), check_stock=False)
        quote = validate_coupon(
            body.code,
            lines,
            customer_email=body.customer_email or (identity.email if identity else None),
            customer_id=identity.user_id if identity else None,
            applied_code=body.applied_code,
        )
    except ValidationError as exc:
        return ValidateCouponResponse(valid=False, error=_first_message(exc))

    return ValidateCouponResponse(
        valid=True,
        code=quote.code,
        discount_type=quote.discount_type,
        discount_amount=quote.discount_amount,
        free_shipping=quote.free_shipping,
        eligible_vendor_ids=quote.eligible_vendor_ids,
    )


# --- Vendor coupons ---


@vendor_coupon_router.get("")
async def my_coupons(identity: AuthenticatedIdentity = Depends(require_vendor)) -> list[dict]:
    return [coupon_to_dict(c) for c in list_coupons(vendor_id=identity.vendor_id)]


@vendor_coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_vendor_coupon(
    body: CreateCouponRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> CouponIdResponse:
    command = _create_command(
        body,
        scope=CouponScope.VENDOR.value,
        vendor_id=identity.vendor_id,
        created_by=identity.user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CouponIdResponse(coupon_id=result)


@vendor_coupon_router.post("/{code}/deactivate", response_model=StatusResponse)
async def deactivate_vendor_coupon(
    code: str, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    current_domain.process(DeactivateCoupon(code=code, vendor_id=identity.vendor_id), asynchronous=False)
    return StatusResponse()


# --- Platform coupons ---


@admin_coupon_router.get("")
async def all_coupons(_: AuthenticatedIdentity = Depends(require_admin)) -> list[dict]:
    return [coupon_to_dict(c) for c in list_coupons()]


@admin_coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_platform_coupon(
    body: CreateCouponRequest, identity: AuthenticatedIdentity = Depends(require_admin)
) -> CouponIdResponse:
    command = _create_command(body, scope=CouponScope.PLATFORM.value, created_by=identity.user_id)
    result = current_domain.process(command, asynchronous=False)
    return CouponIdResponse(coupon_id=result)


@admin_coupon_router.post("/{code}/deactivate", response_model=StatusResponse)
async def deactivate_platform_coupon(code: str, _: AuthenticatedIdentity = Depends(require_admin)) -> StatusResponse:
    current_domain.process(DeactivateCoupon(code=code), asynchronous=False)
    return StatusResponse()

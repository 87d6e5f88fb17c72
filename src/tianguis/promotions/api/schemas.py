"""Pydantic request/response schemas for the Promotions API."""

from datetime import datetime

from pydantic import BaseModel, Field


class CartItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class ValidateCouponRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "BIENVENIDA10",
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "customer_email": "ana@example.mx",
                    "applied_code": None,
                }
            ]
        }
    }

    code: str = Field(..., max_length=50)
    items: list[CartItemSchema]
    customer_email: str | None = Field(None, max_length=254)
    applied_code: str | None = Field(None, max_length=50)


class ValidateCouponResponse(BaseModel):
    valid: bool
    code: str | None = None
    discount_type: str | None = None
    discount_amount: float | None = None
    free_shipping: bool | None = None
    eligible_vendor_ids: list[str] | None = None
    error: str | None = None


class CreateCouponRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "BIENVENIDA10",
                    "name": "Welcome 10%",
                    "discount_type": "percentage",
                    "value": 10,
                    "minimum_order_amount": 500,
                    "maximum_discount_amount": 300,
                    "first_time_customers_only": True,
                }
            ]
        }
    }

    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=150)
    description: str | None = None
    discount_type: str
    value: float = Field(0.0, ge=0)
    minimum_order_amount: float | None = Field(None, ge=0)
    maximum_discount_amount: float | None = Field(None, ge=0)
    usage_limit: int | None = Field(None, ge=1)
    per_customer_limit: int = Field(1, ge=1)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    category_ids: list[str] = Field(default_factory=list)
    vendor_ids: list[str] = Field(default_factory=list)
    product_ids: list[str] = Field(default_factory=list)
    first_time_customers_only: bool = False


class CouponIdResponse(BaseModel):
    coupon_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


def coupon_to_dict(coupon) -> dict:
    return {
        "id": str(coupon.id),
        "code": coupon.code,
        "name": coupon.name,
        "description": coupon.description,
        "discount_type": coupon.discount_type,
        "value": coupon.value,
        "minimum_order_amount": coupon.minimum_order_amount,
        "maximum_discount_amount": coupon.maximum_discount_amount,
        "usage_limit": coupon.usage_limit,
        "times_used": coupon.times_used,
        "per_customer_limit": coupon.per_customer_limit,
        "starts_at": coupon.starts_at.isoformat() if coupon.starts_at else None,
        "expires_at": coupon.expires_at.isoformat() if coupon.expires_at else None,
        "category_ids": coupon.restricted_category_ids,
        "vendor_ids": coupon.restricted_vendor_ids,
        "product_ids": coupon.restricted_product_ids,
        "first_time_customers_only": coupon.first_time_customers_only,
        "is_active": coupon.is_active,
        "scope": coupon.scope,
        "vendor_id": str(coupon.vendor_id) if coupon.vendor_id else None,
    }

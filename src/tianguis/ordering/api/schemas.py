"""Pydantic request/response schemas for the Ordering API.

These are external contracts, separate from the internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    full_name: str = Field(..., max_length=150)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    postal_code: str = Field(..., max_length=20)
    country: str = Field("MX", min_length=2, max_length=2)
    phone: str | None = Field(None, max_length=30)


class CartItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class StartCheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": "prod-001", "quantity": 1},
                        {"product_id": "prod-002", "quantity": 2},
                    ],
                    "customer_email": "ana@example.mx",
                    "customer_name": "Ana López",
                    "shipping_address": {
                        "full_name": "Ana López",
                        "street": "Av. Juárez 100",
                        "city": "Ciudad de México",
                        "state": "CDMX",
                        "postal_code": "06000",
                        "country": "MX",
                    },
                    "coupon_codes": ["BIENVENIDA10"],
                }
            ]
        }
    }

    items: list[CartItemSchema]
    customer_email: str = Field(..., max_length=254)
    customer_name: str | None = Field(None, max_length=150)
    shipping_address: AddressSchema
    coupon_codes: list[str] = Field(default_factory=list)


class StartCheckoutResponse(BaseModel):
    checkout_id: str
    session_id: str
    url: str
    breakdown: dict


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLookupRequest(BaseModel):
    email: str = Field(..., max_length=254)
    order_number: str = Field(..., max_length=30)


class UpdateOrderStatusRequest(BaseModel):
    status: str
    reason: str | None = None


class AddTrackingRequest(BaseModel):
    carrier: str | None = Field(None, max_length=100)
    tracking_number: str = Field(..., max_length=100)


class CancelOrderRequest(BaseModel):
    reason: str


class StatusResponse(BaseModel):
    status: str = "ok"


def order_to_dict(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "checkout_id": str(order.checkout_id),
        "vendor_id": str(order.vendor_id),
        "customer_email": order.customer_email,
        "customer_name": order.customer_name,
        "shipping_address": order.shipping_address.to_dict() if order.shipping_address else None,
        "items": [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "discount": order.discount,
        "shipping": order.shipping,
        "tax": order.tax,
        "total": order.total,
        "currency": order.currency,
        "coupon_code": order.coupon_code,
        "status": order.status,
        "payment_status": order.payment_status,
        "carrier": order.carrier,
        "tracking_number": order.tracking_number,
        "cancellation_reason": order.cancellation_reason,
        "placed_at": order.placed_at.isoformat() if order.placed_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }

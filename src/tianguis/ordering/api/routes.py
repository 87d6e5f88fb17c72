"""FastAPI routes for checkout and orders."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from tianguis.catalogue.search import parse_positive_int
from tianguis.identity.access import optional_identity, require_admin, require_customer, require_vendor
from tianguis.identity.credentials import AuthenticatedIdentity
from tianguis.ordering.api.schemas import (
    AddTrackingRequest,
    CancelOrderRequest,
    OrderLookupRequest,
    StartCheckoutRequest,
    StartCheckoutResponse,
    StatusResponse,
    UpdateOrderStatusRequest,
    order_to_dict,
)
from tianguis.ordering.checkout.payment import orders_for_checkout
from tianguis.ordering.checkout.session import CheckoutSession
from tianguis.ordering.checkout.start import StartCheckout
from tianguis.ordering.order.fulfillment import AddTracking, CancelOrder, UpdateOrderStatus
from tianguis.ordering.order.lookup import (
    DEFAULT_PAGE_SIZE,
    all_orders,
    lookup_guest_order,
    orders_for_customer,
    orders_for_vendor,
)


def _paging(page: str | None, limit: str | None) -> dict:
    return {"page": parse_positive_int(page, 1), "limit": parse_positive_int(limit, DEFAULT_PAGE_SIZE)}


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/sessions", status_code=201, response_model=StartCheckoutResponse)
async def start_checkout(
    body: StartCheckoutRequest, identity: AuthenticatedIdentity | None = Depends(optional_identity)
) -> StartCheckoutResponse:
    command = StartCheckout(
        items=json.dumps([item.model_dump() for item in body.items]),
        customer_email=body.customer_email,
        customer_name=body.customer_name,
        customer_id=identity.user_id if identity else None,
        shipping_address=json.dumps(body.shipping_address.model_dump(exclude_none=True)),
        coupon_codes=json.dumps(body.coupon_codes),
    )
    result = current_domain.process(command, asynchronous=False)
    return StartCheckoutResponse(**result)


@checkout_router.get("/sessions/{checkout_id}")
async def checkout_status(checkout_id: str) -> dict:
    session = current_domain.repository_for(CheckoutSession).get(checkout_id)
    return {
        "checkout_id": str(session.id),
        "status": session.status,
        "total": session.total,
        "currency": session.currency,
        "order_numbers": [order.order_number for order in orders_for_checkout(session.id)],
    }


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/lookup")
async def lookup_order(body: OrderLookupRequest) -> dict:
    return order_to_dict(lookup_guest_order(body.email, body.order_number))


@order_router.get("/mine")
async def my_orders(
    page: str | None = None,
    limit: str | None = None,
    identity: AuthenticatedIdentity = Depends(require_customer),
) -> list[dict]:
    orders = orders_for_customer(identity.user_id, identity.email, **_paging(page, limit))
    return [order_to_dict(o) for o in orders]


# ---------------------------------------------------------------------------
# Vendor Order Router
# ---------------------------------------------------------------------------
vendor_order_router = APIRouter(prefix="/vendor/orders", tags=["vendor"])


@vendor_order_router.get("")
async def vendor_orders(
    status: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    identity: AuthenticatedIdentity = Depends(require_vendor),
) -> list[dict]:
    return [order_to_dict(o) for o in orders_for_vendor(identity.vendor_id, status, **_paging(page, limit))]


@vendor_order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_status(
    order_id: str, body: UpdateOrderStatusRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        reason=body.reason,
        vendor_id=identity.vendor_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@vendor_order_router.post("/{order_id}/tracking", response_model=StatusResponse)
async def add_tracking(
    order_id: str, body: AddTrackingRequest, identity: AuthenticatedIdentity = Depends(require_vendor)
) -> StatusResponse:
    command = AddTracking(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        vendor_id=identity.vendor_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.get("")
async def list_all_orders(
    status: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    _: AuthenticatedIdentity = Depends(require_admin),
) -> list[dict]:
    return [order_to_dict(o) for o in all_orders(status, **_paging(page, limit))]


@admin_order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, _: AuthenticatedIdentity = Depends(require_admin)
) -> StatusResponse:
    current_domain.process(
        CancelOrder(order_id=order_id, reason=body.reason, cancelled_by="admin"), asynchronous=False
    )
    return StatusResponse()

"""Tianguis FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Every request runs inside the ``tianguis`` domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml.
from tianguis.domain import tianguis  # noqa: E402
from tianguis.identity.tokens import signing_secret  # noqa: E402
from tianguis.payments.gateway import get_gateway  # noqa: E402
from tianguis.payments.gateway.port import PaymentGatewayError  # noqa: E402
from tianguis.utils.logging import add_context, clear_context  # noqa: E402

tianguis.init()

# Both raise in production when a signing secret is missing
signing_secret()
get_gateway()

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Tianguis API",
    description="Multi-vendor marketplace: storefront, checkout, vendor dashboards and back office",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Protean domain context and bind request info to the logs."""
    clear_context()
    add_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
    with tianguis.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------
register_exception_handlers(app)


@app.exception_handler(PaymentGatewayError)
async def payment_gateway_error_handler(request: Request, exc: PaymentGatewayError):
    logger.error("payment_gateway.error", error=str(exc))
    return JSONResponse(status_code=502, content={"error": f"Payment processor error: {exc}"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("request.unhandled_error", error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from tianguis.backoffice.api import router as admin_router  # noqa: E402
from tianguis.catalogue.api import category_router, product_router, vendor_product_router  # noqa: E402
from tianguis.i18n.api import router as i18n_router  # noqa: E402
from tianguis.identity.api import router as identity_router  # noqa: E402
from tianguis.ordering.api import (  # noqa: E402
    admin_order_router,
    checkout_router,
    order_router,
    vendor_order_router,
)
from tianguis.payments.api import router as payments_router  # noqa: E402
from tianguis.promotions.api import admin_coupon_router, vendor_coupon_router  # noqa: E402
from tianguis.promotions.api import router as coupon_router  # noqa: E402
from tianguis.vendors.api import router as vendor_router  # noqa: E402

for router in (
    identity_router,
    product_router,
    category_router,
    vendor_router,
    vendor_product_router,
    vendor_order_router,
    vendor_coupon_router,
    coupon_router,
    checkout_router,
    order_router,
    payments_router,
    admin_router,
    admin_order_router,
    admin_coupon_router,
    i18n_router,
):
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": tianguis.name})

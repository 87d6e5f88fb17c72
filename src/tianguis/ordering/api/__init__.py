"""Ordering API package."""

from tianguis.ordering.api.routes import admin_order_router, checkout_router, order_router, vendor_order_router

__all__ = ["checkout_router", "order_router", "vendor_order_router", "admin_order_router"]

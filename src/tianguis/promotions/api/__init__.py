"""Promotions API package."""

from tianguis.promotions.api.routes import admin_coupon_router, router, vendor_coupon_router

__all__ = ["router", "vendor_coupon_router", "admin_coupon_router"]

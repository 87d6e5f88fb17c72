"""Catalogue API package."""

from tianguis.catalogue.api.routes import category_router, product_router, vendor_product_router

__all__ = ["product_router", "category_router", "vendor_product_router"]

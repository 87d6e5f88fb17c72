"""Vendors API package."""

from tianguis.vendors.api.routes import router

__all__ = ["router"]

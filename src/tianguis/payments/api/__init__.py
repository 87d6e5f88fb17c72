"""Payments API package."""

from tianguis.payments.api.routes import router

__all__ = ["router"]

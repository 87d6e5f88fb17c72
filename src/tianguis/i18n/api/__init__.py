"""Locale routing API package."""

from tianguis.i18n.api.routes import router

__all__ = ["router"]

"""Back office API package."""

from tianguis.backoffice.api.routes import router

__all__ = ["router"]

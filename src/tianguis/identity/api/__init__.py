"""Identity API package."""

from tianguis.identity.api.routes import router

__all__ = ["router"]

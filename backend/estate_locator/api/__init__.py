"""HTTP API for Estate Locator."""

from .routes import get_location_service, router

__all__ = ["get_location_service", "router"]

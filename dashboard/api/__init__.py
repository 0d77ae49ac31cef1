"""HTTP API: relay and signal routes."""

from dashboard.api.routes import router

__all__ = ["router"]

"""Routers exposed by the web API."""

from .dubbing_routes import router as dubbing_router
from .playback_routes import router as playback_router
from .system_routes import router as system_router

__all__ = ["dubbing_router", "playback_router", "system_router"]

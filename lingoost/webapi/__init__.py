"""FastAPI application exposing dubbing submission and playback sessions."""

from .application import create_app

__all__ = ["create_app"]

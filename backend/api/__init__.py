"""
GateKeeper API package.

Provides the FastAPI application for the GateKeeper authentication service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]

"""
TrustCircle API package.

Provides the FastAPI application for connections and vault sharing.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]

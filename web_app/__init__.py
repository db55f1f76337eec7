"""Web application for URL shortener."""

from .app_factory import create_app
from .context import AppContext, build_context

__all__ = ["create_app", "AppContext", "build_context"]

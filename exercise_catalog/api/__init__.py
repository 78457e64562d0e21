"""HTTP boundary for the exercise query engine."""

from .app import create_app
from .routes import API_PREFIX, DATA_VERSION_HEADER

__all__ = ["API_PREFIX", "DATA_VERSION_HEADER", "create_app"]

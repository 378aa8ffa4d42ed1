"""HTTP API for grocery_ml."""

from .api import create_app

__all__ = ["create_app"]

"""Command-line interface for grocery_ml."""

from .cli import cli

__all__ = ["cli"]

"""CLI command modules for grocery_ml."""

from .config import config
from .models import models
from .serve import serve
from .storage import storage
from .train import train

__all__ = [
    "config",
    "models",
    "serve",
    "storage",
    "train",
]

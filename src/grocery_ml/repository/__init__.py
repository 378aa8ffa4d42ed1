"""File repository layer for dependency injection."""

from grocery_ml.repository.local import LocalFileRepository
from grocery_ml.repository.protocol import FileRepositoryProtocol

__all__ = [
    "FileRepositoryProtocol",
    "LocalFileRepository",
]

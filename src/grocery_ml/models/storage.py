# models/storage.py
"""
Data models for storage analytics.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import ToDictMixin


@dataclass
class StorageInfo(ToDictMixin):
    """Totals across every stored model."""

    total_models: int
    total_size: int
    available_space: int

    _camel_case = True


@dataclass
class ModelStorageInfo(ToDictMixin):
    """On-disk footprint of a single model directory."""

    exists: bool
    size: int = 0
    file_count: int = 0
    files: List[str] = field(default_factory=list)

    _camel_case = True


@dataclass
class StorageSummary:
    """Storage totals in human-readable units, rounded to 2 decimals."""

    total_models: int
    total_size_gb: float
    available_space_gb: float
    average_model_size_mb: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "totalModels": self.total_models,
            "totalSizeGB": self.total_size_gb,
            "availableSpaceGB": self.available_space_gb,
            "averageModelSizeMB": self.average_model_size_mb,
        }

# core/analytics.py
"""
Storage analytics over a ModelStore.

Sizes come from a recursive walk of each model directory. Entries that
cannot be read are logged and counted as zero. Available space is a
configured constant, not a query against the filesystem; do not treat it as
a real free-space figure.
"""

from pathlib import Path
from typing import Union

from grocery_ml.core.config import DEFAULT_CONFIG, Config
from grocery_ml.core.logger import get_logger
from grocery_ml.core.model_store import ModelStore, is_valid_model_id
from grocery_ml.models.storage import ModelStorageInfo, StorageInfo, StorageSummary

logger = get_logger(__name__)

BYTES_PER_MB = 1024 * 1024
BYTES_PER_GB = 1024 * 1024 * 1024

DEFAULT_AVAILABLE_SPACE = DEFAULT_CONFIG["analytics"]["available_space_bytes"]


class StorageAnalytics:
    """Size and count statistics for stored models."""

    def __init__(self, store: ModelStore, available_space_bytes: int = DEFAULT_AVAILABLE_SPACE):
        self.store = store
        self.repository = store.repository
        self.available_space_bytes = available_space_bytes

    @classmethod
    def from_config(cls, store: ModelStore, config: Config) -> "StorageAnalytics":
        available = config.get("analytics", "available_space_bytes", DEFAULT_AVAILABLE_SPACE)
        return cls(store, available_space_bytes=int(available))

    def get_directory_size(self, path: Union[str, Path]) -> int:
        """Sum file sizes under ``path``, depth first."""
        try:
            files = self.repository.list_files(path)
            subdirs = self.repository.list_dirs(path)
        except OSError as e:
            logger.warning(f"Error calculating directory size for {path}: {e}")
            return 0

        total = 0
        for file_path in files:
            try:
                total += self.repository.get_size(file_path)
            except OSError as e:
                logger.warning(f"Error reading size of {file_path}: {e}")
        for subdir in subdirs:
            total += self.get_directory_size(subdir)
        return total

    def get_available_disk_space(self) -> int:
        return self.available_space_bytes

    def get_storage_info(self) -> StorageInfo:
        """Model count and total bytes across the store."""
        try:
            model_ids = self.store.list_model_ids()
        except OSError as e:
            logger.error(f"Error listing models: {e}")
            model_ids = []

        total_size = sum(
            self.get_directory_size(self.store.model_path(model_id)) for model_id in model_ids
        )
        return StorageInfo(
            total_models=len(model_ids),
            total_size=total_size,
            available_space=self.get_available_disk_space(),
        )

    def get_model_info(self, model_id: str) -> ModelStorageInfo:
        """Size and file listing for one model directory."""
        if not is_valid_model_id(model_id):
            return ModelStorageInfo(exists=False)

        model_dir = self.store.model_path(model_id)
        if not self.repository.is_dir(model_dir):
            return ModelStorageInfo(exists=False)

        try:
            files = sorted(p.name for p in self.repository.list_files(model_dir))
        except OSError as e:
            logger.error(f"Error getting model info for {model_id}: {e}")
            return ModelStorageInfo(exists=False)

        return ModelStorageInfo(
            exists=True,
            size=self.get_directory_size(model_dir),
            file_count=len(files),
            files=files,
        )

    def get_storage_summary(self) -> StorageSummary:
        """Storage totals in GB/MB, rounded to 2 decimals."""
        info = self.get_storage_info()
        average_mb = (
            round(info.total_size / info.total_models / BYTES_PER_MB, 2)
            if info.total_models > 0
            else 0
        )
        return StorageSummary(
            total_models=info.total_models,
            total_size_gb=round(info.total_size / BYTES_PER_GB, 2),
            available_space_gb=round(info.available_space / BYTES_PER_GB, 2),
            average_model_size_mb=average_mb,
        )

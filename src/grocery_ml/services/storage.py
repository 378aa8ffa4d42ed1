# services/storage.py
"""
Service for storage statistics.
"""

from typing import Any, Dict

from grocery_ml.core.analytics import StorageAnalytics
from grocery_ml.models.storage import ModelStorageInfo, StorageInfo, StorageSummary

from .base import REASON_NOT_FOUND, BaseService, ServiceResult


class StorageService(BaseService):
    """
    Service for storage size and count statistics.

    Available space is a configured figure, not a filesystem query.
    """

    def __init__(self, analytics: StorageAnalytics, file_repository=None) -> None:
        super().__init__(file_repository)
        self.analytics = analytics

    def get_status(self) -> ServiceResult[Dict[str, Any]]:
        """Readiness summary for the training endpoint."""
        info = self.analytics.get_storage_info()
        return ServiceResult.ok(
            data={
                "status": "ready",
                "modelsCount": info.total_models,
                "totalSize": info.total_size,
                "availableSpace": info.available_space,
            },
            message="Training system ready",
        )

    def get_storage_info(self) -> ServiceResult[StorageInfo]:
        """Model count, total bytes, and available space."""
        return ServiceResult.ok(data=self.analytics.get_storage_info())

    def get_storage_summary(self) -> ServiceResult[StorageSummary]:
        """Storage totals in GB/MB."""
        return ServiceResult.ok(data=self.analytics.get_storage_summary())

    def get_model_info(self, model_id: str) -> ServiceResult[ModelStorageInfo]:
        """On-disk footprint of one model."""
        info = self.analytics.get_model_info(model_id)
        if not info.exists:
            return ServiceResult.fail(f"Model not found: {model_id}", reason=REASON_NOT_FOUND)
        return ServiceResult.ok(data=info)

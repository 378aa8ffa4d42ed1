# services/models.py
"""
Service for stored model management.
"""

from typing import Any, Dict, List

from grocery_ml.core.exceptions import ModelStoreError
from grocery_ml.core.logger import get_logger
from grocery_ml.core.model_store import ModelStore
from grocery_ml.models.artifact import ModelBundle, ModelInfo

from .base import (
    REASON_STORAGE,
    REASON_VALIDATION,
    BaseService,
    ServiceResult,
    store_failure,
)

logger = get_logger(__name__)


class ModelService(BaseService):
    """
    Service for listing, reading, deleting, and importing stored models.
    """

    def __init__(self, store: ModelStore, file_repository=None) -> None:
        super().__init__(file_repository)
        self.store = store

    def list_models(self) -> ServiceResult[List[ModelInfo]]:
        """List stored models, newest first."""
        models = self.store.list_models()
        return ServiceResult.ok(data=models, message=f"Found {len(models)} models")

    def list_model_entries(self) -> ServiceResult[List[Dict[str, Any]]]:
        """List stored model directories with their paths."""
        entries = [
            {
                "id": model_id,
                "path": str(self.store.model_path(model_id)),
                "exists": self.store.model_exists(model_id),
            }
            for model_id in self.store.list_model_ids()
        ]
        return ServiceResult.ok(data=entries)

    def get_model(self, model_id: str) -> ServiceResult[ModelBundle]:
        """Load a stored bundle."""
        result = self.store.load(model_id)
        if not result.ok:
            return store_failure(result, model_id)
        return ServiceResult.ok(data=result.value)

    def delete_model(self, model_id: str) -> ServiceResult[bool]:
        """Delete a stored model."""
        result = self.store.delete(model_id)
        if not result.ok:
            return store_failure(result, model_id)
        return ServiceResult.ok(data=True, message=f"Deleted model {model_id}")

    def import_model(self, request: Dict[str, Any]) -> ServiceResult[ModelBundle]:
        """
        Save a bundle supplied as an import request.

        Args:
            request: ``{modelId, modelName?, files, metadata?}`` payload

        Returns:
            ServiceResult containing the saved bundle
        """
        try:
            bundle = self.store.import_bundle(request)
        except ValueError as e:
            return ServiceResult.fail(str(e), reason=REASON_VALIDATION)
        except ModelStoreError as e:
            logger.error(f"Import failed: {e}")
            return ServiceResult.fail(str(e), reason=REASON_STORAGE)

        return ServiceResult.ok(
            data=bundle,
            message=f"Model {bundle.model_id} saved successfully",
        )

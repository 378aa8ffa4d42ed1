# services/export.py
"""
Service for exporting stored models as ZIP archives or JSON.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from grocery_ml.core.archive import (
    ZIP_CONTENT_TYPE,
    archive_filename,
    build_archive,
    bundle_to_payload,
)
from grocery_ml.core.exceptions import ArchiveError
from grocery_ml.core.logger import get_logger
from grocery_ml.core.model_store import ModelStore
from grocery_ml.repository import LocalFileRepository

from .base import BaseService, ServiceResult, store_failure

logger = get_logger(__name__)


@dataclass
class ExportPayload:
    """
    An exported model.

    Exactly one of ``archive`` (ZIP bytes) and ``payload`` (JSON-safe dict)
    is set.
    """

    model_id: str
    filename: str
    archive: Optional[bytes] = None
    payload: Optional[Dict[str, Any]] = None

    @property
    def is_archive(self) -> bool:
        return self.archive is not None

    @property
    def content_type(self) -> str:
        return ZIP_CONTENT_TYPE if self.is_archive else "application/json"

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


class ExportService(BaseService):
    """
    Service for packaging stored models.

    When an archive is requested but cannot be built, the JSON form is
    returned instead with a warning.
    """

    def __init__(self, store: ModelStore, file_repository=None) -> None:
        super().__init__(file_repository)
        self.store = store

    def export_model(self, model_id: str, download: bool = True) -> ServiceResult[ExportPayload]:
        """
        Export a stored model.

        Args:
            model_id: Model to export
            download: Build a ZIP archive (JSON form when False)

        Returns:
            ServiceResult containing the ExportPayload
        """
        loaded = self.store.load(model_id)
        if not loaded.ok:
            return store_failure(loaded, model_id)

        bundle = loaded.value
        filename = archive_filename(bundle)
        warnings = []

        if download:
            try:
                archive = build_archive(bundle)
                return ServiceResult.ok(
                    data=ExportPayload(model_id=model_id, filename=filename, archive=archive),
                    message=f"Packaged {model_id} ({len(archive)} bytes)",
                )
            except ArchiveError as e:
                logger.warning(f"Falling back to JSON export for {model_id}: {e}")
                warnings.append(str(e))

        return ServiceResult.ok(
            data=ExportPayload(
                model_id=model_id,
                filename=filename,
                payload=bundle_to_payload(bundle),
            ),
            warnings=warnings,
        )

    def write_archive(
        self,
        model_id: str,
        output_path: Optional[Union[str, Path]] = None,
    ) -> ServiceResult[str]:
        """
        Write a model's ZIP archive to disk.

        Args:
            model_id: Model to export
            output_path: Destination file (default: ``<name>.zip`` in the
                current directory)

        Returns:
            ServiceResult containing the written path
        """
        result = self.export_model(model_id, download=True)
        if not result.success:
            return result

        export = result.data
        if not export.is_archive:
            return ServiceResult.fail(
                f"Could not create archive for {model_id}: {'; '.join(result.warnings)}"
            )

        path = Path(output_path) if output_path else Path(export.filename)
        repository = self.file_repository or LocalFileRepository()
        try:
            repository.write_binary(path, export.archive)
        except OSError as e:
            return ServiceResult.fail(f"Failed to write {path}: {e}")

        return ServiceResult.ok(data=str(path), message=f"Exported {model_id} to {path}")

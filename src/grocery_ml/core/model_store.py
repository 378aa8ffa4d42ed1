# core/model_store.py
"""
Directory-Backed Model Store
============================

Persists model bundles as one directory per model id:

    <root>/<model_id>/
        model.json
        model.weights.bin
        metadata.json
        README.txt
        model-info.json     lightweight index record used for listing

Every operation returns a StoreResult tagged with a StoreStatus, so callers
can tell a missing model from a permission problem or a corrupt file. The
``*_model`` methods adapt those results to the plain sentinel interface:
``load_model`` returns None and ``delete_model`` returns False on any
failure, and ``save_model`` raises ModelStoreError.

Saves are serialized per model id through a fixed pool of striped locks.
The five files are written in parallel into a hidden staging directory
next to the target, which is then renamed into place. Readers therefore
see either the previous bundle or the new one, never a mix of files from
two saves. Saving under an existing id replaces the old bundle whole.
Hidden directories (staging leftovers from a crash) are ignored by listing.

Usage:
    from grocery_ml.core.model_store import ModelStore

    store = ModelStore("stored-models")
    store.save_model(bundle.model_id, bundle)

    for info in store.list_models():
        print(info.id, info.accuracy)

    bundle = store.load_model("grocery-model-1700000000000")
    store.delete_model("grocery-model-1700000000000")
"""

import dataclasses
import json
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union
from uuid import uuid4

from grocery_ml.core.archive import decode_weights, payload_file_bytes
from grocery_ml.core.artifacts import (
    build_model_info,
    bundle_from_files,
    bundle_to_files,
    format_timestamp,
)
from grocery_ml.core.exceptions import ModelStoreError
from grocery_ml.core.logger import get_logger
from grocery_ml.models.artifact import (
    BUNDLE_FILES,
    INFO_FILE,
    METADATA_FILE,
    MODEL_FILE,
    README_FILE,
    WEIGHTS_FILE,
    ModelBundle,
    ModelInfo,
)
from grocery_ml.repository import FileRepositoryProtocol, LocalFileRepository

logger = get_logger(__name__)

T = TypeVar("T")

STAGING_PREFIX = ".staging-"
TRASH_PREFIX = ".trash-"

# Size of the fixed lock pool that serializes work per model id
LOCK_STRIPES = 64


class StoreStatus(Enum):
    """Outcome of a store operation."""

    OK = "ok"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    CORRUPT = "corrupt"
    IO_FAILURE = "io_failure"


@dataclasses.dataclass
class StoreResult(Generic[T]):
    """Tagged result of a store operation."""

    status: StoreStatus
    value: Optional[T] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    @classmethod
    def success(cls, value: T = None) -> "StoreResult[T]":
        return cls(status=StoreStatus.OK, value=value)

    @classmethod
    def failure(cls, status: StoreStatus, detail: str) -> "StoreResult[T]":
        return cls(status=status, detail=detail)


def status_for_error(error: BaseException) -> StoreStatus:
    """Map an exception raised during file access to a StoreStatus."""
    if isinstance(error, PermissionError):
        return StoreStatus.PERMISSION_DENIED
    if isinstance(error, (FileNotFoundError, NotADirectoryError)):
        return StoreStatus.NOT_FOUND
    if isinstance(error, (KeyError, ValueError, TypeError)):
        return StoreStatus.CORRUPT
    return StoreStatus.IO_FAILURE


def is_valid_model_id(model_id: Any) -> bool:
    """
    Check that a model id can name a single directory under the store root.

    Rejects empty ids, ids with path separators or NUL bytes, and ids
    starting with a dot (hidden names, ``.`` and ``..``).
    """
    if not isinstance(model_id, str) or not model_id.strip():
        return False
    if model_id.startswith("."):
        return False
    return not any(ch in model_id for ch in ("/", "\\", "\x00"))


def bundle_from_import(request: Dict[str, Any]) -> ModelBundle:
    """
    Build a bundle from an import request.

    The request has the shape::

        {
            "modelId": "...",
            "modelName": "...",            # optional
            "files": {
                "model.json": str | dict,
                "metadata.json": str | dict,
                "README.txt": str,
                "model.weights.bin": list[float] | base64 str,
            },
            "metadata": {...},             # optional overrides
        }

    Raises:
        ValueError: With a user-facing message when the request is incomplete
            or its files cannot be parsed
    """
    if not isinstance(request, dict):
        raise ValueError("Missing required fields (modelId, files)")

    model_id = request.get("modelId")
    files = request.get("files")
    if not model_id or not isinstance(files, dict):
        raise ValueError("Missing required fields (modelId, files)")
    if not is_valid_model_id(model_id):
        raise ValueError(f"Invalid model id: {model_id!r}")

    missing = [name for name in BUNDLE_FILES if not files.get(name)]
    if missing:
        raise ValueError(f"Missing required model files: {', '.join(missing)}")

    raw_files = {
        MODEL_FILE: payload_file_bytes(files[MODEL_FILE]),
        METADATA_FILE: payload_file_bytes(files[METADATA_FILE]),
        README_FILE: payload_file_bytes(files[README_FILE]),
        WEIGHTS_FILE: decode_weights(files[WEIGHTS_FILE]),
    }

    try:
        bundle = bundle_from_files(model_id, raw_files)
    except (KeyError, ValueError, TypeError) as e:
        raise ValueError(f"Invalid model files: {e}") from e

    metadata = bundle.metadata
    overrides = request.get("metadata") if isinstance(request.get("metadata"), dict) else {}
    name = request.get("modelName") or metadata.name or model_id
    classes = overrides.get("classes") or metadata.classes
    labels = overrides.get("labels") or overrides.get("classes") or metadata.labels

    metadata = dataclasses.replace(
        metadata,
        name=name,
        model_name=name,
        classes=list(classes),
        labels=list(labels),
        created_at=metadata.created_at or format_timestamp(),
        trained_images=overrides.get("trainedImages", metadata.trained_images),
        final_metrics=dict(overrides.get("finalMetrics") or metadata.final_metrics),
        model_size=len(raw_files[WEIGHTS_FILE]),
    )
    return dataclasses.replace(bundle, metadata=metadata)


class ModelStore:
    """
    Filesystem-backed store of model bundles.

    Args:
        root: Directory holding one subdirectory per model
        repository: File repository used for all I/O
        max_workers: Threads used to write a bundle's files
    """

    def __init__(
        self,
        root: Union[str, Path],
        repository: Optional[FileRepositoryProtocol] = None,
        max_workers: int = 5,
    ) -> None:
        self.root = Path(root)
        self.repository = repository or LocalFileRepository()
        self.max_workers = max_workers
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def _lock_for(self, model_id: str) -> threading.Lock:
        # Ids sharing a stripe also share a lock; the pool never grows.
        return self._locks[hash(model_id) % len(self._locks)]

    def model_path(self, model_id: str) -> Path:
        """Return the directory a model is stored in."""
        return self.root / model_id

    def ensure_root(self) -> None:
        self.repository.mkdir(self.root, parents=True)

    def model_exists(self, model_id: str) -> bool:
        return is_valid_model_id(model_id) and self.repository.is_dir(self.model_path(model_id))

    def list_model_ids(self) -> List[str]:
        """Names of stored model directories, skipping hidden ones."""
        if not self.repository.is_dir(self.root):
            return []
        return [
            path.name
            for path in self.repository.list_dirs(self.root)
            if not path.name.startswith(".")
        ]

    # ------------------------------------------------------------------
    # Tagged operations
    # ------------------------------------------------------------------

    def save(self, bundle: ModelBundle) -> StoreResult[Path]:
        """Write a bundle and its index record, replacing any previous bundle."""
        model_id = bundle.model_id
        if not is_valid_model_id(model_id):
            return StoreResult.failure(StoreStatus.IO_FAILURE, f"Invalid model id: {model_id!r}")

        files = bundle_to_files(bundle)
        files[INFO_FILE] = json.dumps(build_model_info(bundle).to_dict(), indent=2).encode("utf-8")

        target = self.model_path(model_id)
        token = uuid4().hex[:8]
        staging = self.root / f"{STAGING_PREFIX}{model_id}-{token}"

        with self._lock_for(model_id):
            try:
                self.ensure_root()
                self.repository.mkdir(staging, parents=True)
                self._write_files(staging, files)
                self._publish(staging, target, model_id, token)
            except (OSError, ValueError) as e:
                logger.error(f"Error saving model {model_id}: {e}")
                self._discard(staging)
                return StoreResult.failure(status_for_error(e), str(e))

        logger.info(f"Saved model {model_id} to {target}")
        return StoreResult.success(target)

    def _write_files(self, directory: Path, files: Dict[str, bytes]) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self.repository.write_binary, directory / name, data)
                for name, data in files.items()
            ]
            # result() re-raises the first write error
            for future in futures:
                future.result()

    def _publish(self, staging: Path, target: Path, model_id: str, token: str) -> None:
        if not self.repository.exists(target):
            self.repository.rename(staging, target)
            return

        trash = self.root / f"{TRASH_PREFIX}{model_id}-{token}"
        self.repository.rename(target, trash)
        try:
            self.repository.rename(staging, target)
        except OSError:
            self.repository.rename(trash, target)
            raise
        self._discard(trash)

    def _discard(self, path: Path) -> None:
        if not self.repository.exists(path):
            return
        try:
            self.repository.delete_dir(path, recursive=True)
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")

    def load(self, model_id: str) -> StoreResult[ModelBundle]:
        """Read a stored bundle."""
        if not is_valid_model_id(model_id):
            return StoreResult.failure(StoreStatus.NOT_FOUND, f"Invalid model id: {model_id!r}")

        model_dir = self.model_path(model_id)
        with self._lock_for(model_id):
            if not self.repository.is_dir(model_dir):
                return StoreResult.failure(StoreStatus.NOT_FOUND, f"Model not found: {model_id}")

            try:
                files = {name: self.repository.read_binary(model_dir / name) for name in BUNDLE_FILES}
            except OSError as e:
                logger.warning(f"Error reading model {model_id}: {e}")
                return StoreResult.failure(status_for_error(e), str(e))

        try:
            bundle = bundle_from_files(model_id, files)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Model {model_id} is corrupt: {e}")
            return StoreResult.failure(StoreStatus.CORRUPT, f"Corrupt model files: {e}")

        return StoreResult.success(bundle)

    def delete(self, model_id: str) -> StoreResult[bool]:
        """Remove a stored bundle and its directory."""
        if not is_valid_model_id(model_id):
            return StoreResult.failure(StoreStatus.NOT_FOUND, f"Invalid model id: {model_id!r}")

        model_dir = self.model_path(model_id)
        with self._lock_for(model_id):
            if not self.repository.is_dir(model_dir):
                return StoreResult.failure(StoreStatus.NOT_FOUND, f"Model not found: {model_id}")
            try:
                self.repository.delete_dir(model_dir, recursive=True)
            except OSError as e:
                logger.error(f"Error deleting model {model_id}: {e}")
                return StoreResult.failure(status_for_error(e), str(e))

        logger.info(f"Deleted model {model_id}")
        return StoreResult.success(True)

    def read_info(self, model_id: str) -> StoreResult[ModelInfo]:
        """Read a model's index record."""
        info_path = self.model_path(model_id) / INFO_FILE
        try:
            data = json.loads(self.repository.read_binary(info_path).decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"{INFO_FILE} is not a JSON object")
            return StoreResult.success(ModelInfo.from_dict(data, model_id=model_id))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            return StoreResult.failure(status_for_error(e), str(e))

    # ------------------------------------------------------------------
    # Sentinel adapters
    # ------------------------------------------------------------------

    def save_model(self, model_id: str, bundle: ModelBundle) -> None:
        """
        Save ``bundle`` under ``model_id``.

        Raises:
            ModelStoreError: If the bundle could not be written
        """
        if bundle.model_id != model_id:
            bundle = dataclasses.replace(bundle, model_id=model_id)
        result = self.save(bundle)
        if not result.ok:
            raise ModelStoreError(f"Failed to save model: {result.detail}", model_id=model_id)

    def load_model(self, model_id: str) -> Optional[ModelBundle]:
        """Return the stored bundle, or None if it is missing or unreadable."""
        return self.load(model_id).value

    def delete_model(self, model_id: str) -> bool:
        """Return True if the model existed and was removed."""
        return self.delete(model_id).ok

    def list_models(self) -> List[ModelInfo]:
        """
        List index records of all stored models, newest first.

        A model whose index file is missing or unreadable is logged and
        skipped; listing itself never fails.
        """
        try:
            model_ids = self.list_model_ids()
        except OSError as e:
            logger.error(f"Error listing models in {self.root}: {e}")
            return []

        models = []
        for model_id in model_ids:
            result = self.read_info(model_id)
            if result.ok:
                models.append(result.value)
            else:
                logger.warning(f"Skipping model {model_id}: {result.detail}")

        models.sort(key=lambda info: str(info.created_at), reverse=True)
        return models

    def import_bundle(self, request: Dict[str, Any]) -> ModelBundle:
        """
        Save a bundle supplied as an import request.

        Raises:
            ValueError: If the request is incomplete or malformed
            ModelStoreError: If the bundle could not be written
        """
        bundle = bundle_from_import(request)
        self.save_model(bundle.model_id, bundle)
        return bundle

# core/archive.py
"""
Export Packaging
================

ZIP packaging of a model bundle and the JSON form returned when an archive
is not requested or cannot be built.

Archive entries are always written in the order model.json, metadata.json,
README.txt, model.weights.bin.
"""

import base64
import binascii
import io
import json
import zipfile
from typing import Any, Dict

import numpy as np

from grocery_ml.core.artifacts import bundle_to_files
from grocery_ml.core.exceptions import ArchiveError
from grocery_ml.core.logger import get_logger
from grocery_ml.models.artifact import (
    METADATA_FILE,
    MODEL_FILE,
    README_FILE,
    WEIGHTS_FILE,
    ModelBundle,
)

logger = get_logger(__name__)

ARCHIVE_ORDER = (MODEL_FILE, METADATA_FILE, README_FILE, WEIGHTS_FILE)
ZIP_CONTENT_TYPE = "application/zip"


def build_archive(bundle: ModelBundle) -> bytes:
    """
    Package the four bundle files into an in-memory ZIP archive.

    Args:
        bundle: The bundle to package

    Returns:
        The archive bytes

    Raises:
        ArchiveError: If the archive cannot be written
    """
    try:
        files = bundle_to_files(bundle)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_ref:
            for name in ARCHIVE_ORDER:
                zip_ref.writestr(name, files[name])
        return buffer.getvalue()
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        logger.error(f"Error creating ZIP for {bundle.model_id}: {e}")
        raise ArchiveError(f"Failed to create ZIP file: {e}") from e


def archive_filename(bundle: ModelBundle) -> str:
    """Attachment filename: the metadata name, falling back to the model id."""
    return f"{bundle.metadata.name or bundle.model_id}.zip"


def encode_weights(weights: bytes) -> str:
    return base64.b64encode(weights).decode("ascii")


def decode_weights(value: Any) -> bytes:
    """
    Decode weights supplied in a JSON payload.

    Accepts raw bytes, a base64 string, or a list of numbers (packed as
    little-endian float32).

    Raises:
        ValueError: If the value is in none of those forms
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid weights format: {e}") from e
    if isinstance(value, (list, tuple)):
        try:
            return np.asarray(value, dtype="<f4").tobytes()
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid weights format: {e}") from e
    raise ValueError("Invalid weights format")


def bundle_to_payload(bundle: ModelBundle) -> Dict[str, Any]:
    """
    JSON-safe form of a bundle.

    Text files are included as strings and the weight buffer as base64, so
    the ``files`` mapping can be posted back to the import endpoint as is.
    """
    files = bundle_to_files(bundle)
    return {
        "id": bundle.model_id,
        "metadata": bundle.metadata.to_dict(),
        "files": {
            MODEL_FILE: files[MODEL_FILE].decode("utf-8"),
            METADATA_FILE: files[METADATA_FILE].decode("utf-8"),
            README_FILE: files[README_FILE].decode("utf-8"),
            WEIGHTS_FILE: encode_weights(files[WEIGHTS_FILE]),
        },
    }


def payload_file_bytes(value: Any) -> bytes:
    """Encode a text file from a JSON payload; parsed JSON is re-serialized."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2).encode("utf-8")
    raise ValueError(f"Unsupported file content type: {type(value).__name__}")

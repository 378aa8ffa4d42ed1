# core/datasets.py
"""
Dataset Loading
===============

Reads a training dataset from disk in one of two layouts:

    dataset.json                  {"classes": [{"name": ..., "images": [data URLs]}]}

    dataset/                      one subdirectory per class, named by label
        Apples/
            img001.jpg
            img002.png
        Oranges/
            ...

Images in a class directory are encoded as base64 data URLs, the same form
the HTTP API accepts. Files with unrecognized extensions are skipped.
Nothing here validates counts or balance; that is left to the validator.
"""

import base64
import json
from pathlib import Path
from typing import Dict, Optional, Union

from grocery_ml.core.exceptions import DatasetLoadError
from grocery_ml.core.logger import get_logger
from grocery_ml.models.training import TrainingClass, TrainingDataset
from grocery_ml.repository import FileRepositoryProtocol, LocalFileRepository

logger = get_logger(__name__)

# File extension -> data URL image subtype
IMAGE_TYPES: Dict[str, str] = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
    "gif": "gif",
    "webp": "webp",
    "bmp": "bmp",
    "tif": "tiff",
    "tiff": "tiff",
}


def encode_image_data_url(data: bytes, image_type: str) -> str:
    """Encode raw image bytes as ``data:image/<type>;base64,<payload>``."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:image/{image_type};base64,{payload}"


def load_dataset_json(
    path: Union[str, Path],
    repository: Optional[FileRepositoryProtocol] = None,
) -> TrainingDataset:
    """Load a ``{"classes": [...]}`` JSON document."""
    repository = repository or LocalFileRepository()
    try:
        data = json.loads(repository.read_text(path))
    except OSError as e:
        raise DatasetLoadError(f"Cannot read dataset file: {e}", path=str(path)) from e
    except ValueError as e:
        raise DatasetLoadError(f"Dataset file is not valid JSON: {e}", path=str(path)) from e

    if not isinstance(data, dict) or "classes" not in data:
        raise DatasetLoadError('Dataset file must contain a "classes" list', path=str(path))

    return TrainingDataset.from_dict(data)


def load_dataset_directory(
    path: Union[str, Path],
    repository: Optional[FileRepositoryProtocol] = None,
) -> TrainingDataset:
    """Load a directory with one image subdirectory per class."""
    repository = repository or LocalFileRepository()
    classes = []
    try:
        class_dirs = [d for d in repository.list_dirs(path) if not d.name.startswith(".")]
        for class_dir in class_dirs:
            images = []
            for image_path in repository.list_files(class_dir):
                image_type = IMAGE_TYPES.get(repository.get_extension(image_path).lower())
                if image_type is None:
                    logger.debug(f"Skipping non-image file {image_path}")
                    continue
                images.append(
                    encode_image_data_url(repository.read_binary(image_path), image_type)
                )
            logger.debug(f"Loaded {len(images)} images for class {class_dir.name}")
            classes.append(TrainingClass(name=class_dir.name, images=images))
    except OSError as e:
        raise DatasetLoadError(f"Cannot read dataset directory: {e}", path=str(path)) from e

    return TrainingDataset(classes=classes)


def load_dataset(
    path: Union[str, Path],
    repository: Optional[FileRepositoryProtocol] = None,
) -> TrainingDataset:
    """
    Load a dataset from a JSON file or a class-per-subdirectory tree.

    Args:
        path: JSON file or dataset directory
        repository: File repository used for reading

    Returns:
        TrainingDataset (not yet validated)

    Raises:
        DatasetLoadError: If the path is missing or cannot be parsed
    """
    repository = repository or LocalFileRepository()

    if repository.is_dir(path):
        dataset = load_dataset_directory(path, repository)
    elif repository.is_file(path):
        dataset = load_dataset_json(path, repository)
    else:
        raise DatasetLoadError("Dataset not found", path=str(path))

    logger.info(
        f"Loaded dataset from {path}: {dataset.num_classes} classes, "
        f"{dataset.total_images} images"
    )
    return dataset

# core/validation.py
"""
Training Data Validation
========================

Rejects malformed or insufficient datasets before any training work begins.

Validation fails fast: the first violated rule is returned as a single
message and nothing is raised. Downstream code (executor, artifact
generator) assumes the dataset it receives has passed here.

Rules, in order:
    1. at least ``min_classes`` classes
    2. per class: a non-blank name, at least one image, at least
       ``min_images_per_class`` images, and every image a decodable
       base64 data URL of an accepted raster type
    3. at least ``min_total_images`` images overall, a max/min
       images-per-class ratio of at most ``max_class_ratio``, and class
       names unique ignoring case

Usage:
    from grocery_ml.core.validation import validate_training_data

    result = validate_training_data(dataset)
    if not result.is_valid:
        print(result.error)
"""

import base64
import binascii
import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from grocery_ml.core.config import DEFAULT_CONFIG, Config
from grocery_ml.core.logger import get_logger
from grocery_ml.models.base import ToDictMixin
from grocery_ml.models.training import ClassCount, TrainingClass, TrainingDataset, TrainingStats

logger = get_logger(__name__)

_DEFAULTS = DEFAULT_CONFIG["validation"]

BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
MIN_DATA_URL_LENGTH = 50


@dataclass
class ValidationConfig:
    """Thresholds applied by the validator."""

    min_classes: int = _DEFAULTS["min_classes"]
    min_images_per_class: int = _DEFAULTS["min_images_per_class"]
    min_total_images: int = _DEFAULTS["min_total_images"]
    max_class_ratio: float = _DEFAULTS["max_class_ratio"]
    min_image_bytes: int = _DEFAULTS["min_image_bytes"]
    accepted_image_types: List[str] = field(
        default_factory=lambda: list(_DEFAULTS["accepted_image_types"])
    )

    @classmethod
    def from_config(cls, config: Config) -> "ValidationConfig":
        """Build from the ``[validation]`` section of a Config."""
        section = config.validation or {}
        return cls(
            min_classes=int(section.get("min_classes", cls.min_classes)),
            min_images_per_class=int(
                section.get("min_images_per_class", cls.min_images_per_class)
            ),
            min_total_images=int(section.get("min_total_images", cls.min_total_images)),
            max_class_ratio=float(section.get("max_class_ratio", cls.max_class_ratio)),
            min_image_bytes=int(section.get("min_image_bytes", cls.min_image_bytes)),
            accepted_image_types=list(
                section.get("accepted_image_types", _DEFAULTS["accepted_image_types"])
            ),
        )


@dataclass
class ValidationResult(ToDictMixin):
    """Outcome of validating a dataset."""

    is_valid: bool
    error: Optional[str] = None

    _camel_case = True

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


def _data_url_pattern(accepted_types: Sequence[str]) -> re.Pattern:
    types = "|".join(re.escape(t) for t in accepted_types)
    return re.compile(rf"^data:image/({types});base64,", re.IGNORECASE)


def is_valid_image(image: object, config: Optional[ValidationConfig] = None) -> bool:
    """
    Check that a value is a base64 data URL of an accepted image type.

    Args:
        image: Candidate image, normally a ``data:image/...;base64,...`` string
        config: Validation thresholds (defaults when omitted)

    Returns:
        True if the payload is well-formed base64 that decodes to at least
        ``config.min_image_bytes`` bytes
    """
    config = config or ValidationConfig()

    if not isinstance(image, str) or len(image) < MIN_DATA_URL_LENGTH:
        return False

    match = _data_url_pattern(config.accepted_image_types).match(image)
    if match is None:
        return False

    payload = image[match.end():]
    if not payload or not BASE64_PATTERN.match(payload) or len(payload) % 4 != 0:
        return False

    try:
        decoded = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return False

    return len(decoded) >= config.min_image_bytes


def _describe_image(image: object) -> str:
    if isinstance(image, str):
        return f"str starting with {image[:MIN_DATA_URL_LENGTH]!r}"
    return type(image).__name__


def _validate_class(training_class: TrainingClass, config: ValidationConfig) -> ValidationResult:
    name = training_class.name
    if not isinstance(name, str) or not name.strip():
        return ValidationResult.invalid("All classes must have a non-empty name")

    count = len(training_class.images)
    if count == 0:
        return ValidationResult.invalid(f'Class "{name}" must have at least one image')

    if count < config.min_images_per_class:
        return ValidationResult.invalid(
            f'Class "{name}" needs at least {config.min_images_per_class} images '
            f"to train (has {count})"
        )

    for index, image in enumerate(training_class.images):
        if not is_valid_image(image, config):
            logger.debug(f'Image {index + 1} of class "{name}" failed validation')
            return ValidationResult.invalid(
                f'Image {index + 1} in class "{name}" is not a valid base64 image data URL '
                f"(received {_describe_image(image)})"
            )

    return ValidationResult.valid()


def _validate_quality(dataset: TrainingDataset, config: ValidationConfig) -> ValidationResult:
    total_images = dataset.total_images
    if total_images < config.min_total_images:
        return ValidationResult.invalid(
            f"Need at least {config.min_total_images} images in total to train a model "
            f"(has {total_images})"
        )

    counts = dataset.images_per_class
    ratio = max(counts) / min(counts)
    if ratio > config.max_class_ratio:
        return ValidationResult.invalid(
            f"Classes are too unbalanced: largest/smallest ratio {ratio:.1f} "
            f"exceeds {config.max_class_ratio:g}:1"
        )

    lowered = [name.lower() for name in dataset.labels]
    if len(set(lowered)) != len(lowered):
        return ValidationResult.invalid("Class names must be unique (ignoring case)")

    return ValidationResult.valid()


def validate_training_data(
    dataset: TrainingDataset,
    config: Optional[ValidationConfig] = None,
) -> ValidationResult:
    """
    Validate a dataset and return the first violated rule.

    Args:
        dataset: Classes and images submitted for training
        config: Validation thresholds (defaults when omitted)

    Returns:
        ValidationResult with ``is_valid`` and, when invalid, one error message
    """
    config = config or ValidationConfig()

    logger.debug(
        f"Validating dataset: {dataset.num_classes} classes, {dataset.total_images} images"
    )

    if dataset.num_classes < config.min_classes:
        return ValidationResult.invalid(
            f"Need at least {config.min_classes} classes to train (has {dataset.num_classes})"
        )

    for training_class in dataset.classes:
        result = _validate_class(training_class, config)
        if not result.is_valid:
            return result

    return _validate_quality(dataset, config)


def get_training_stats(dataset: TrainingDataset) -> TrainingStats:
    """Summarize class and image counts for a dataset."""
    counts = dataset.images_per_class
    total = sum(counts)
    return TrainingStats(
        total_classes=dataset.num_classes,
        total_images=total,
        average_images_per_class=math.floor(total / len(counts) + 0.5) if counts else 0,
        min_images=min(counts) if counts else 0,
        max_images=max(counts) if counts else 0,
        class_distribution=[
            ClassCount(class_name=c.name, image_count=len(c.images)) for c in dataset.classes
        ],
    )

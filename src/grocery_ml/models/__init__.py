"""Data models for Grocery ML."""

from grocery_ml.models.artifact import (
    BUNDLE_FILES,
    INFO_FILE,
    METADATA_FILE,
    MODEL_FILE,
    README_FILE,
    WEIGHTS_FILE,
    ModelBundle,
    ModelInfo,
    ModelMetadata,
    ModelTopology,
    WeightSpec,
    WeightsManifest,
)
from grocery_ml.models.base import ToDictMixin
from grocery_ml.models.storage import ModelStorageInfo, StorageInfo, StorageSummary
from grocery_ml.models.training import (
    ClassCount,
    EpochMetrics,
    ProgressMetrics,
    TrainingClass,
    TrainingDataset,
    TrainingHistory,
    TrainingProgress,
    TrainingRun,
    TrainingStats,
)

__all__ = [
    # Base
    "ToDictMixin",
    # Training
    "TrainingClass",
    "TrainingDataset",
    "EpochMetrics",
    "TrainingHistory",
    "ClassCount",
    "TrainingStats",
    "ProgressMetrics",
    "TrainingProgress",
    "TrainingRun",
    # Artifacts
    "ModelTopology",
    "WeightSpec",
    "WeightsManifest",
    "ModelMetadata",
    "ModelBundle",
    "ModelInfo",
    "MODEL_FILE",
    "WEIGHTS_FILE",
    "METADATA_FILE",
    "README_FILE",
    "INFO_FILE",
    "BUNDLE_FILES",
    # Storage
    "StorageInfo",
    "ModelStorageInfo",
    "StorageSummary",
]

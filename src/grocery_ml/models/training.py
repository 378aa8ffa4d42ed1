# models/training.py
"""
Data models for training datasets, metrics, and progress.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import ToDictMixin


@dataclass
class TrainingClass(ToDictMixin):
    """A labeled class with its base64 data-URL images."""

    name: str
    images: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingClass":
        """Create from a request payload entry."""
        images = data.get("images")
        return cls(
            name=data.get("name") or "",
            images=list(images) if isinstance(images, (list, tuple)) else [],
        )


@dataclass
class TrainingDataset(ToDictMixin):
    """The full set of classes submitted for a training run."""

    classes: List[TrainingClass] = field(default_factory=list)

    @property
    def num_classes(self) -> int:
        return len(self.classes)

    @property
    def images_per_class(self) -> List[int]:
        return [len(c.images) for c in self.classes]

    @property
    def total_images(self) -> int:
        return sum(self.images_per_class)

    @property
    def labels(self) -> List[str]:
        return [c.name for c in self.classes]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingDataset":
        """
        Create from a ``{"classes": [...]}`` payload.

        Missing or malformed keys produce empty values rather than errors;
        rejecting them is the validator's job.
        """
        raw_classes = data.get("classes") if isinstance(data, dict) else None
        if not isinstance(raw_classes, (list, tuple)):
            return cls(classes=[])
        return cls(
            classes=[
                TrainingClass.from_dict(item) if isinstance(item, dict) else TrainingClass(name="")
                for item in raw_classes
            ]
        )


@dataclass
class EpochMetrics(ToDictMixin):
    """Metrics recorded for one synthetic epoch (1-based)."""

    epoch: int
    loss: float
    accuracy: float
    val_loss: float
    val_accuracy: float

    _camel_case = True


@dataclass
class TrainingHistory(ToDictMixin):
    """Per-epoch metric sequences, all of equal length."""

    loss: List[float] = field(default_factory=list)
    accuracy: List[float] = field(default_factory=list)
    val_loss: List[float] = field(default_factory=list)
    val_accuracy: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.loss)

    def append(self, metrics: EpochMetrics) -> None:
        """Record one epoch across all four sequences."""
        self.loss.append(metrics.loss)
        self.accuracy.append(metrics.accuracy)
        self.val_loss.append(metrics.val_loss)
        self.val_accuracy.append(metrics.val_accuracy)

    def final_metrics(self) -> Optional[EpochMetrics]:
        """Return the last recorded epoch, or None for an empty history."""
        if not self.loss:
            return None
        return EpochMetrics(
            epoch=len(self.loss),
            loss=self.loss[-1],
            accuracy=self.accuracy[-1],
            val_loss=self.val_loss[-1],
            val_accuracy=self.val_accuracy[-1],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingHistory":
        """Create from the JSON form stored in metadata.json."""
        return cls(
            loss=list(data.get("loss", [])),
            accuracy=list(data.get("accuracy", [])),
            val_loss=list(data.get("val_loss", [])),
            val_accuracy=list(data.get("val_accuracy", [])),
        )


@dataclass
class ClassCount(ToDictMixin):
    """Image count for one class."""

    class_name: str
    image_count: int

    _camel_case = True


@dataclass
class TrainingStats(ToDictMixin):
    """Summary statistics for a training dataset."""

    total_classes: int
    total_images: int
    average_images_per_class: int
    min_images: int
    max_images: int
    class_distribution: List[ClassCount] = field(default_factory=list)

    _camel_case = True


@dataclass
class ProgressMetrics(ToDictMixin):
    """Loss/accuracy pair reported in a progress snapshot."""

    loss: float
    accuracy: float


@dataclass
class TrainingProgress(ToDictMixin):
    """A training progress snapshot."""

    progress: int
    current_epoch: int
    total_epochs: int
    estimated_time_remaining: int
    metrics: ProgressMetrics

    _camel_case = True


@dataclass
class TrainingRun(ToDictMixin):
    """Outcome of the synthetic epoch loop."""

    model_id: str
    history: TrainingHistory
    final_metrics: EpochMetrics

    _camel_case = True

    @property
    def epochs(self) -> int:
        return len(self.history)

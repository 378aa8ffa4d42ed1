# models/artifact.py
"""
Data models for generated model artifacts and their stored index records.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import ToDictMixin
from .training import TrainingHistory

MODEL_FILE = "model.json"
WEIGHTS_FILE = "model.weights.bin"
METADATA_FILE = "metadata.json"
README_FILE = "README.txt"
INFO_FILE = "model-info.json"

BUNDLE_FILES = (MODEL_FILE, WEIGHTS_FILE, METADATA_FILE, README_FILE)


@dataclass
class ModelTopology(ToDictMixin):
    """Static architecture descriptor written to model.json."""

    layers: List[Dict[str, Any]]
    class_name: str = "Sequential"
    name: str = "sequential"
    format: str = "layers-model"
    generated_by: str = "TensorFlow.js tfjs-layers v4.22.0"
    converted_by: str = "Grocery ML Classifier v1.0.0"

    def to_model_json(self) -> Dict[str, Any]:
        """Return the layers-model document layout."""
        return {
            "modelTopology": {
                "class_name": self.class_name,
                "config": {
                    "name": self.name,
                    "layers": self.layers,
                },
            },
            "format": self.format,
            "generatedBy": self.generated_by,
            "convertedBy": self.converted_by,
        }

    @classmethod
    def from_model_json(cls, data: Dict[str, Any]) -> "ModelTopology":
        """Create from a parsed model.json document."""
        topology = data["modelTopology"]
        config = topology["config"]
        return cls(
            layers=list(config["layers"]),
            class_name=topology.get("class_name", "Sequential"),
            name=config.get("name", "sequential"),
            format=data.get("format", "layers-model"),
            generated_by=data.get("generatedBy", ""),
            converted_by=data.get("convertedBy", ""),
        )


@dataclass
class WeightSpec(ToDictMixin):
    """Name, shape, and dtype of one weight tensor."""

    name: str
    shape: List[int]
    dtype: str = "float32"

    @property
    def size(self) -> int:
        count = 1
        for dim in self.shape:
            count *= dim
        return count


@dataclass
class WeightsManifest(ToDictMixin):
    """Ordered weight tensor descriptors for the files in ``paths``."""

    weights: List[WeightSpec]
    paths: List[str] = field(default_factory=lambda: [WEIGHTS_FILE])

    @property
    def total_elements(self) -> int:
        return sum(w.size for w in self.weights)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeightsManifest":
        return cls(
            weights=[
                WeightSpec(name=w["name"], shape=list(w["shape"]), dtype=w.get("dtype", "float32"))
                for w in data.get("weights", [])
            ],
            paths=list(data.get("paths", [WEIGHTS_FILE])),
        )


@dataclass
class ModelMetadata(ToDictMixin):
    """Descriptive metadata written to metadata.json."""

    model_name: str
    name: str
    labels: List[str]
    classes: List[str]
    class_labels: List[Dict[str, Any]]
    num_classes: int
    input_shape: List[int]
    output_shape: List[int]
    created_at: str
    trained_images: int
    epochs: int
    final_metrics: Dict[str, float]
    training_history: TrainingHistory
    model_size: int
    preprocessing_config: Dict[str, Any]
    model_files: Dict[str, str]
    architecture: str = "CNN"
    framework: str = "TensorFlow.js"
    version: str = "4.22.0"
    batch_size: int = 16
    optimizer: str = "adam"
    learning_rate: float = 0.001
    loss: str = "categoricalCrossentropy"
    metrics: List[str] = field(default_factory=lambda: ["accuracy"])
    compatibility_version: str = "1.0"

    _camel_case = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelMetadata":
        """Create from the camelCase JSON stored in metadata.json."""
        return cls(
            model_name=data.get("modelName", ""),
            name=data.get("name", ""),
            labels=list(data.get("labels", [])),
            classes=list(data.get("classes", [])),
            class_labels=list(data.get("classLabels", [])),
            num_classes=data.get("numClasses", 0),
            input_shape=list(data.get("inputShape", [])),
            output_shape=list(data.get("outputShape", [])),
            created_at=data.get("createdAt", ""),
            trained_images=data.get("trainedImages", 0),
            epochs=data.get("epochs", 0),
            final_metrics=dict(data.get("finalMetrics", {})),
            training_history=TrainingHistory.from_dict(data.get("trainingHistory", {})),
            model_size=data.get("modelSize", 0),
            preprocessing_config=dict(data.get("preprocessingConfig", {})),
            model_files=dict(data.get("modelFiles", {})),
            architecture=data.get("architecture", "CNN"),
            framework=data.get("framework", "TensorFlow.js"),
            version=data.get("version", "4.22.0"),
            batch_size=data.get("batchSize", 16),
            optimizer=data.get("optimizer", "adam"),
            learning_rate=data.get("learningRate", 0.001),
            loss=data.get("loss", "categoricalCrossentropy"),
            metrics=list(data.get("metrics", ["accuracy"])),
            compatibility_version=data.get("compatibilityVersion", "1.0"),
        )


@dataclass
class ModelBundle:
    """
    The atomic persisted unit: topology, weights, manifest, metadata, readme.

    Once saved a bundle is never updated in place; saving again under the
    same id replaces it whole.
    """

    model_id: str
    topology: ModelTopology
    weights: bytes
    manifest: WeightsManifest
    metadata: ModelMetadata
    readme: str

    @property
    def weights_size(self) -> int:
        return len(self.weights)


@dataclass
class ModelInfo(ToDictMixin):
    """Lightweight index record stored as model-info.json."""

    id: str
    name: str
    labels: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    created_at: str = ""
    trained_images: int = 0
    accuracy: float = 0.0
    size: int = 0
    architecture: str = "CNN"
    framework: str = "TensorFlow.js"
    epochs: int = 0

    _camel_case = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any], model_id: Optional[str] = None) -> "ModelInfo":
        """
        Create from an index file.

        Index files written by older tools used ``modelName``, ``modelSize``,
        and ``finalMetrics.accuracy``; those keys are accepted as fallbacks.
        """
        record_id = model_id or data.get("id", "")
        final_metrics = data.get("finalMetrics") or {}
        classes = data.get("classes") or data.get("labels") or []
        return cls(
            id=record_id,
            name=data.get("name") or data.get("modelName") or record_id,
            labels=list(data.get("labels") or classes),
            classes=list(classes),
            created_at=data.get("createdAt", ""),
            trained_images=data.get("trainedImages", 0),
            accuracy=data.get("accuracy", final_metrics.get("accuracy", 0.0)),
            size=data.get("size", data.get("modelSize", 0)),
            architecture=data.get("architecture", "CNN"),
            framework=data.get("framework", "TensorFlow.js"),
            epochs=data.get("epochs", 0),
        )

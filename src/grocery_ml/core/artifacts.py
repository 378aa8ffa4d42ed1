# core/artifacts.py
"""
Model Artifact Generation
=========================

Builds the multi-file bundle that mimics a TensorFlow.js layers model:

    model.json          topology descriptor (plus the weights manifest)
    model.weights.bin   flat little-endian float32 weight buffer
    metadata.json       labels, shapes, training history, final metrics
    README.txt          human-readable summary

The architecture is fixed apart from the output width:

    conv2d(32, 3x3) -> max_pool -> conv2d(64, 3x3) -> max_pool ->
    conv2d(128, 3x3) -> global_avg_pool -> dropout(0.5) -> dense(softmax)

over a 224x224x3 input. Weights are drawn uniformly from
``[-limit, limit]`` with ``limit = sqrt(6 / (total_params / 4))``, an
aggregate stand-in for per-layer Glorot bounds. Nothing is ever fitted.

The manifest lists each kernel and bias with its shape and dtype. Its total
element count always equals the buffer length, but nothing checks that a
consumer slicing the buffer tensor by tensor gets meaningful values; the
buffer is a single uniform draw.
"""

import copy
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from grocery_ml.core.logger import get_logger
from grocery_ml.models.artifact import (
    METADATA_FILE,
    MODEL_FILE,
    README_FILE,
    WEIGHTS_FILE,
    ModelBundle,
    ModelInfo,
    ModelMetadata,
    ModelTopology,
    WeightsManifest,
    WeightSpec,
)
from grocery_ml.models.training import TrainingDataset, TrainingHistory

logger = get_logger(__name__)

INPUT_SHAPE = (224, 224, 3)
KERNEL_SIZE = (3, 3)
CONV_FILTERS = (32, 64, 128)
DROPOUT_RATE = 0.5
WEIGHT_DTYPE = "float32"

# Used for metadata when a history has no epochs
FALLBACK_FINAL_METRICS = {
    "accuracy": 0.85,
    "loss": 0.25,
    "val_accuracy": 0.80,
    "val_loss": 0.30,
}

# Fixed history attached to bundles generated without a training run
UNTRAINED_HISTORY = {
    "loss": [0.8, 0.6, 0.4, 0.3, 0.25],
    "accuracy": [0.6, 0.7, 0.8, 0.85, 0.9],
    "val_loss": [0.9, 0.7, 0.5, 0.35, 0.3],
    "val_accuracy": [0.55, 0.65, 0.75, 0.8, 0.85],
}

PREPROCESSING_CONFIG = {
    "imageSize": [224, 224],
    "normalization": "0-1",
    "channels": 3,
    "dataFormat": "channels_last",
}

GENERATOR_NAME = "Grocery ML Classifier v1.0.0"


def _conv_layer_names() -> List[str]:
    return ["conv2d"] + [f"conv2d_{i}" for i in range(1, len(CONV_FILTERS))]


def count_parameters(num_classes: int) -> int:
    """
    Count trainable parameters for ``num_classes`` outputs.

    Three 3x3 conv blocks (3->32->64->128 channels, each with bias) and a
    dense softmax layer over the 128 pooled features.
    """
    kh, kw = KERNEL_SIZE
    total = 0
    in_channels = INPUT_SHAPE[2]
    for filters in CONV_FILTERS:
        total += kh * kw * in_channels * filters + filters
        in_channels = filters
    total += in_channels * num_classes + num_classes
    return total


def build_topology(num_classes: int, input_shape: Sequence[int] = INPUT_SHAPE) -> ModelTopology:
    """Build the layers-model topology descriptor."""
    conv_names = _conv_layer_names()
    layers: List[Dict[str, Any]] = []

    for index, (name, filters) in enumerate(zip(conv_names, CONV_FILTERS)):
        config: Dict[str, Any] = {
            "name": name,
            "trainable": True,
            "filters": filters,
            "kernel_size": list(KERNEL_SIZE),
            "strides": [1, 1],
            "padding": "same",
            "activation": "relu",
            "use_bias": True,
        }
        if index == 0:
            config["batch_input_shape"] = [None, *input_shape]
        layers.append({"class_name": "Conv2D", "config": config})

        if index < len(CONV_FILTERS) - 1:
            pool_name = "max_pooling2d" if index == 0 else f"max_pooling2d_{index}"
            layers.append(
                {
                    "class_name": "MaxPooling2D",
                    "config": {
                        "name": pool_name,
                        "trainable": True,
                        "pool_size": [2, 2],
                        "strides": [2, 2],
                        "padding": "valid",
                    },
                }
            )

    layers.append(
        {
            "class_name": "GlobalAveragePooling2D",
            "config": {
                "name": "global_average_pooling2d",
                "trainable": True,
                "data_format": "channels_last",
            },
        }
    )
    layers.append(
        {
            "class_name": "Dropout",
            "config": {"name": "dropout", "trainable": True, "rate": DROPOUT_RATE},
        }
    )
    layers.append(
        {
            "class_name": "Dense",
            "config": {
                "name": "dense",
                "trainable": True,
                "units": num_classes,
                "activation": "softmax",
                "use_bias": True,
            },
        }
    )

    return ModelTopology(layers=layers, converted_by=GENERATOR_NAME)


def build_weights_manifest(num_classes: int) -> WeightsManifest:
    """List kernel and bias tensors in layer order."""
    kh, kw = KERNEL_SIZE
    specs: List[WeightSpec] = []
    in_channels = INPUT_SHAPE[2]
    for name, filters in zip(_conv_layer_names(), CONV_FILTERS):
        specs.append(WeightSpec(f"{name}/kernel", [kh, kw, in_channels, filters], WEIGHT_DTYPE))
        specs.append(WeightSpec(f"{name}/bias", [filters], WEIGHT_DTYPE))
        in_channels = filters
    specs.append(WeightSpec("dense/kernel", [in_channels, num_classes], WEIGHT_DTYPE))
    specs.append(WeightSpec("dense/bias", [num_classes], WEIGHT_DTYPE))
    return WeightsManifest(weights=specs)


def weight_limit(total_params: int) -> float:
    return float(np.sqrt(6.0 / (total_params / 4.0)))


def generate_weights(num_classes: int, rng: np.random.Generator) -> bytes:
    """
    Draw the flat weight buffer.

    Returns:
        ``4 * count_parameters(num_classes)`` bytes of little-endian float32
    """
    total = count_parameters(num_classes)
    limit = weight_limit(total)
    logger.debug(f"Generating {total} parameters for {num_classes} classes (limit={limit:.6f})")
    values = rng.uniform(-limit, limit, size=total)
    return values.astype("<f4").tobytes()


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def final_metrics_for(history: TrainingHistory) -> Dict[str, float]:
    """Final-epoch metrics keyed as in metadata.json, with fixed fallbacks."""
    final = history.final_metrics()
    if final is None:
        return dict(FALLBACK_FINAL_METRICS)
    return {
        "accuracy": final.accuracy,
        "loss": final.loss,
        "val_accuracy": final.val_accuracy,
        "val_loss": final.val_loss,
    }


def build_metadata(
    model_id: str,
    labels: Sequence[str],
    trained_images: int,
    history: TrainingHistory,
    model_size: int,
    created_at: Optional[datetime] = None,
) -> ModelMetadata:
    """Compose metadata.json for a bundle."""
    labels = list(labels)
    num_classes = len(labels)
    return ModelMetadata(
        model_name=model_id,
        name=model_id,
        labels=labels,
        classes=list(labels),
        class_labels=[{"id": i, "name": label} for i, label in enumerate(labels)],
        num_classes=num_classes,
        input_shape=list(INPUT_SHAPE),
        output_shape=[num_classes],
        created_at=format_timestamp(created_at),
        trained_images=trained_images,
        epochs=len(history),
        final_metrics=final_metrics_for(history),
        training_history=history,
        model_size=model_size,
        preprocessing_config=copy.deepcopy(PREPROCESSING_CONFIG),
        model_files={
            "model": MODEL_FILE,
            "weights": WEIGHTS_FILE,
            "metadata": METADATA_FILE,
        },
    )


def render_readme(metadata: ModelMetadata) -> str:
    """Render README.txt from metadata."""
    labels = ", ".join(metadata.labels)
    metrics = metadata.final_metrics
    width, height = metadata.input_shape[0], metadata.input_shape[1]
    shape = " x ".join(str(d) for d in metadata.input_shape)
    size_mb = metadata.model_size / (1024 * 1024)

    return f"""# {metadata.model_name}

## Model Information
- ID: {metadata.model_name}
- Architecture: {metadata.architecture}
- Framework: {metadata.framework}
- Created: {metadata.created_at}

## Training Configuration
- Classes: {labels}
- Total images: {metadata.trained_images}
- Epochs trained: {metadata.epochs}
- Optimizer: {metadata.optimizer}
- Learning rate: {metadata.learning_rate}

## Performance
- Final accuracy: {metrics.get("accuracy", 0.0) * 100:.2f}%
- Final loss: {metrics.get("loss", 0.0):.4f}
- Validation accuracy: {metrics.get("val_accuracy", 0.0) * 100:.2f}%

## Model Structure
- Input: {shape} (RGB images)
- Output: {metadata.num_classes} classes
- Model size: {size_mb:.2f} MB

## Usage
1. Load the model with TensorFlow.js
2. Resize images to {width}x{height} pixels
3. Normalize pixel values to the [0, 1] range
4. The model returns probabilities for: {labels}

---
Generated by {GENERATOR_NAME}
"""


def _assemble_bundle(
    model_id: str,
    labels: Sequence[str],
    trained_images: int,
    history: TrainingHistory,
    rng: np.random.Generator,
    created_at: Optional[datetime],
) -> ModelBundle:
    num_classes = len(labels)
    weights = generate_weights(num_classes, rng)
    metadata = build_metadata(
        model_id, labels, trained_images, history, len(weights), created_at=created_at
    )
    bundle = ModelBundle(
        model_id=model_id,
        topology=build_topology(num_classes),
        weights=weights,
        manifest=build_weights_manifest(num_classes),
        metadata=metadata,
        readme=render_readme(metadata),
    )
    logger.info(
        f"Generated model {model_id}: {num_classes} classes, {len(weights)} weight bytes"
    )
    return bundle


def generate_bundle(
    dataset: TrainingDataset,
    history: TrainingHistory,
    model_id: str,
    rng: np.random.Generator,
    created_at: Optional[datetime] = None,
) -> ModelBundle:
    """
    Build a complete bundle for a trained dataset.

    Args:
        dataset: The validated dataset the history was produced from
        history: Per-epoch metrics from the executor
        model_id: Identifier naming the bundle
        rng: Random source for the weight buffer
        created_at: Creation time (now when omitted)

    Returns:
        ModelBundle ready to be saved or archived
    """
    return _assemble_bundle(
        model_id, dataset.labels, dataset.total_images, history, rng, created_at
    )


def generate_untrained_bundle(
    dataset: TrainingDataset,
    model_id: str,
    rng: np.random.Generator,
    created_at: Optional[datetime] = None,
) -> ModelBundle:
    """Build a bundle without running the epoch loop, using a fixed 5-epoch history."""
    history = TrainingHistory.from_dict(UNTRAINED_HISTORY)
    return _assemble_bundle(
        model_id, dataset.labels, dataset.total_images, history, rng, created_at
    )


def build_model_info(bundle: ModelBundle) -> ModelInfo:
    """Derive the model-info.json index record from a bundle."""
    metadata = bundle.metadata
    return ModelInfo(
        id=bundle.model_id,
        name=metadata.name or bundle.model_id,
        labels=list(metadata.labels),
        classes=list(metadata.classes),
        created_at=metadata.created_at,
        trained_images=metadata.trained_images,
        accuracy=metadata.final_metrics.get("accuracy", 0.0),
        size=bundle.weights_size,
        architecture=metadata.architecture,
        framework=metadata.framework,
        epochs=metadata.epochs,
    )


def _dump_json(data: Any) -> bytes:
    return json.dumps(data, indent=2).encode("utf-8")


def bundle_to_files(bundle: ModelBundle) -> Dict[str, bytes]:
    """
    Serialize a bundle to its four canonical files.

    Keys are in archive order: model.json, metadata.json, README.txt,
    model.weights.bin. ``model.json`` also carries the weights manifest in
    the layers-model ``weightsManifest`` group form.
    """
    model_json = bundle.topology.to_model_json()
    model_json["weightsManifest"] = [bundle.manifest.to_dict()]
    return {
        MODEL_FILE: _dump_json(model_json),
        METADATA_FILE: _dump_json(bundle.metadata.to_dict()),
        README_FILE: bundle.readme.encode("utf-8"),
        WEIGHTS_FILE: bundle.weights,
    }


def bundle_from_files(model_id: str, files: Dict[str, bytes]) -> ModelBundle:
    """
    Rebuild a bundle from its canonical files.

    Raises:
        KeyError: A required file or field is missing
        ValueError: A JSON file does not parse
    """
    model_json = json.loads(files[MODEL_FILE].decode("utf-8"))
    metadata = ModelMetadata.from_dict(json.loads(files[METADATA_FILE].decode("utf-8")))

    groups = model_json.get("weightsManifest")
    if groups:
        manifest = WeightsManifest.from_dict(groups[0])
    else:
        manifest = build_weights_manifest(metadata.num_classes)

    return ModelBundle(
        model_id=model_id,
        topology=ModelTopology.from_model_json(model_json),
        weights=files[WEIGHTS_FILE],
        manifest=manifest,
        metadata=metadata,
        readme=files[README_FILE].decode("utf-8"),
    )

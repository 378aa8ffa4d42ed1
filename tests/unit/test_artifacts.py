"""
Unit tests for grocery_ml.core.artifacts module.
"""

import json
from datetime import datetime

import numpy as np
import pytest

from grocery_ml.core.artifacts import (
    FALLBACK_FINAL_METRICS,
    build_metadata,
    build_model_info,
    build_topology,
    build_weights_manifest,
    bundle_from_files,
    bundle_to_files,
    count_parameters,
    format_timestamp,
    generate_untrained_bundle,
    generate_weights,
    render_readme,
    weight_limit,
)
from grocery_ml.models.artifact import METADATA_FILE, MODEL_FILE, README_FILE, WEIGHTS_FILE
from grocery_ml.models.training import TrainingHistory
from tests.helpers import CREATED_AT, make_dataset


class TestParameters:
    """Tests for parameter counting and weight generation."""

    def test_two_class_parameter_count(self):
        assert count_parameters(2) == 93506

    @pytest.mark.parametrize("num_classes", [2, 3, 10])
    def test_manifest_matches_parameter_count(self, num_classes):
        manifest = build_weights_manifest(num_classes)
        assert manifest.total_elements == count_parameters(num_classes)

    def test_weights_size(self, rng):
        weights = generate_weights(2, rng)
        assert len(weights) == 374024

    def test_weights_within_limit(self, rng):
        values = np.frombuffer(generate_weights(3, rng), dtype="<f4")
        limit = weight_limit(count_parameters(3))

        assert values.size == count_parameters(3)
        assert np.all(np.abs(values) <= limit + 1e-6)

    def test_weights_are_reproducible(self):
        a = generate_weights(2, np.random.default_rng(9))
        b = generate_weights(2, np.random.default_rng(9))
        assert a == b


class TestTopology:
    """Tests for build_topology and build_weights_manifest."""

    def test_layer_sequence(self):
        topology = build_topology(4)
        names = [layer["config"]["name"] for layer in topology.layers]

        assert names == [
            "conv2d",
            "max_pooling2d",
            "conv2d_1",
            "max_pooling2d_1",
            "conv2d_2",
            "global_average_pooling2d",
            "dropout",
            "dense",
        ]

    def test_input_and_output(self):
        topology = build_topology(4)

        assert topology.layers[0]["config"]["batch_input_shape"] == [None, 224, 224, 3]
        assert topology.layers[-1]["config"]["units"] == 4
        assert topology.layers[-1]["config"]["activation"] == "softmax"

    def test_model_json_layout(self):
        doc = build_topology(2).to_model_json()

        assert doc["format"] == "layers-model"
        assert doc["modelTopology"]["class_name"] == "Sequential"
        assert len(doc["modelTopology"]["config"]["layers"]) == 8

    def test_manifest_names(self):
        manifest = build_weights_manifest(2)

        assert [w.name for w in manifest.weights] == [
            "conv2d/kernel",
            "conv2d/bias",
            "conv2d_1/kernel",
            "conv2d_1/bias",
            "conv2d_2/kernel",
            "conv2d_2/bias",
            "dense/kernel",
            "dense/bias",
        ]
        assert manifest.weights[-2].shape == [128, 2]
        assert manifest.paths == [WEIGHTS_FILE]


class TestMetadata:
    """Tests for build_metadata and related helpers."""

    def test_format_timestamp(self):
        assert format_timestamp(CREATED_AT) == "2024-05-01T12:30:45.123Z"

    def test_format_timestamp_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05.000Z"

    def test_build_metadata(self):
        history = TrainingHistory(
            loss=[1.0, 0.5], accuracy=[0.5, 0.8], val_loss=[1.2, 0.6], val_accuracy=[0.45, 0.75]
        )
        metadata = build_metadata(
            "m1", ["Apples", "Oranges"], 24, history, 374024, created_at=CREATED_AT
        )

        assert metadata.name == "m1"
        assert metadata.model_name == "m1"
        assert metadata.labels == ["Apples", "Oranges"]
        assert metadata.classes == ["Apples", "Oranges"]
        assert metadata.class_labels == [{"id": 0, "name": "Apples"}, {"id": 1, "name": "Oranges"}]
        assert metadata.num_classes == 2
        assert metadata.input_shape == [224, 224, 3]
        assert metadata.output_shape == [2]
        assert metadata.epochs == 2
        assert metadata.final_metrics == {
            "accuracy": 0.8,
            "loss": 0.5,
            "val_accuracy": 0.75,
            "val_loss": 0.6,
        }
        assert metadata.model_files == {
            "model": MODEL_FILE,
            "weights": WEIGHTS_FILE,
            "metadata": METADATA_FILE,
        }

    def test_empty_history_uses_fallback_metrics(self):
        metadata = build_metadata("m1", ["A", "B"], 24, TrainingHistory(), 100)

        assert metadata.final_metrics == FALLBACK_FINAL_METRICS
        assert metadata.epochs == 0

    def test_metadata_json_keys(self, bundle):
        data = bundle.metadata.to_dict()

        for key in (
            "modelName",
            "classLabels",
            "numClasses",
            "inputShape",
            "createdAt",
            "trainedImages",
            "finalMetrics",
            "trainingHistory",
            "modelSize",
            "preprocessingConfig",
        ):
            assert key in data
        assert set(data["trainingHistory"]) == {"loss", "accuracy", "val_loss", "val_accuracy"}

    def test_readme(self, bundle):
        readme = render_readme(bundle.metadata)

        assert readme.startswith("# test-model")
        assert "Apples, Oranges" in readme
        assert "Final accuracy:" in readme
        assert "Epochs trained: 10" in readme


class TestBundles:
    """Tests for bundle generation and serialization."""

    def test_generated_bundle(self, bundle):
        assert bundle.model_id == "test-model"
        assert bundle.weights_size == 374024
        assert bundle.metadata.model_size == 374024
        assert bundle.metadata.trained_images == 24
        assert bundle.metadata.epochs == 10
        assert bundle.metadata.created_at == "2024-05-01T12:30:45.123Z"

    def test_untrained_bundle(self, rng):
        bundle = generate_untrained_bundle(make_dataset({"A": 1, "B": 2, "C": 3}), "u1", rng)

        assert bundle.metadata.epochs == 5
        assert bundle.metadata.final_metrics["accuracy"] == 0.9
        assert bundle.metadata.num_classes == 3
        assert bundle.weights_size == 4 * count_parameters(3)

    def test_files_in_archive_order(self, bundle):
        files = bundle_to_files(bundle)

        assert list(files) == [MODEL_FILE, METADATA_FILE, README_FILE, WEIGHTS_FILE]
        assert files[WEIGHTS_FILE] == bundle.weights

    def test_model_json_carries_manifest(self, bundle):
        doc = json.loads(bundle_to_files(bundle)[MODEL_FILE])

        assert doc["weightsManifest"][0]["paths"] == [WEIGHTS_FILE]
        assert len(doc["weightsManifest"][0]["weights"]) == 8

    def test_files_round_trip(self, bundle):
        restored = bundle_from_files("test-model", bundle_to_files(bundle))

        assert restored.weights == bundle.weights
        assert restored.metadata == bundle.metadata
        assert restored.topology == bundle.topology
        assert restored.manifest == bundle.manifest
        assert restored.readme == bundle.readme

    def test_missing_manifest_is_rebuilt(self, bundle):
        files = bundle_to_files(bundle)
        doc = json.loads(files[MODEL_FILE])
        del doc["weightsManifest"]
        files[MODEL_FILE] = json.dumps(doc).encode("utf-8")

        restored = bundle_from_files("test-model", files)

        assert restored.manifest.total_elements == count_parameters(2)

    def test_missing_file_raises(self, bundle):
        files = bundle_to_files(bundle)
        del files[README_FILE]

        with pytest.raises(KeyError):
            bundle_from_files("test-model", files)

    def test_model_info(self, bundle):
        info = build_model_info(bundle)

        assert info.id == "test-model"
        assert info.name == "test-model"
        assert info.classes == ["Apples", "Oranges"]
        assert info.size == 374024
        assert info.epochs == 10
        assert info.accuracy == bundle.metadata.final_metrics["accuracy"]

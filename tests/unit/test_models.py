"""
Unit tests for grocery_ml.models module.
"""

from grocery_ml.models.artifact import ModelInfo, ModelMetadata
from grocery_ml.models.base import to_camel_case
from grocery_ml.models.storage import ModelStorageInfo, StorageInfo
from grocery_ml.models.training import (
    EpochMetrics,
    TrainingClass,
    TrainingDataset,
    TrainingHistory,
)


class TestCamelCase:
    """Tests for to_camel_case."""

    def test_conversion(self):
        assert to_camel_case("val_accuracy") == "valAccuracy"
        assert to_camel_case("estimated_time_remaining") == "estimatedTimeRemaining"
        assert to_camel_case("epochs") == "epochs"


class TestTrainingDataset:
    """Tests for TrainingDataset."""

    def test_properties(self):
        dataset = TrainingDataset(
            classes=[TrainingClass("A", ["x", "y"]), TrainingClass("B", ["z"])]
        )

        assert dataset.num_classes == 2
        assert dataset.images_per_class == [2, 1]
        assert dataset.total_images == 3
        assert dataset.labels == ["A", "B"]

    def test_from_dict(self):
        dataset = TrainingDataset.from_dict(
            {"classes": [{"name": "A", "images": ["x"]}, {"name": "B", "images": []}]}
        )

        assert dataset.labels == ["A", "B"]
        assert dataset.images_per_class == [1, 0]

    def test_from_dict_is_tolerant(self):
        assert TrainingDataset.from_dict({}).num_classes == 0
        assert TrainingDataset.from_dict({"classes": "nope"}).num_classes == 0
        assert TrainingDataset.from_dict([]).num_classes == 0
        assert TrainingDataset.from_dict({"classes": [42]}).labels == [""]


class TestTrainingHistory:
    """Tests for TrainingHistory."""

    def test_append_and_final(self):
        history = TrainingHistory()
        history.append(EpochMetrics(1, 1.0, 0.5, 1.1, 0.45))
        history.append(EpochMetrics(2, 0.8, 0.6, 0.9, 0.55))

        assert len(history) == 2
        assert history.final_metrics() == EpochMetrics(2, 0.8, 0.6, 0.9, 0.55)

    def test_empty_final(self):
        assert TrainingHistory().final_metrics() is None

    def test_to_dict_keeps_snake_case(self):
        history = TrainingHistory(loss=[1.0], accuracy=[0.5], val_loss=[1.1], val_accuracy=[0.4])

        assert history.to_dict() == {
            "loss": [1.0],
            "accuracy": [0.5],
            "val_loss": [1.1],
            "val_accuracy": [0.4],
        }

    def test_epoch_metrics_to_dict(self):
        assert EpochMetrics(3, 0.5, 0.7, 0.6, 0.65).to_dict() == {
            "epoch": 3,
            "loss": 0.5,
            "accuracy": 0.7,
            "valLoss": 0.6,
            "valAccuracy": 0.65,
        }


class TestArtifactModels:
    """Tests for artifact data models."""

    def test_metadata_round_trip(self, bundle):
        metadata = bundle.metadata
        assert ModelMetadata.from_dict(metadata.to_dict()) == metadata

    def test_model_info_round_trip(self):
        info = ModelInfo(id="m", name="Model", classes=["A"], labels=["A"], size=10, epochs=3)
        assert ModelInfo.from_dict(info.to_dict()) == info

    def test_model_info_id_override(self):
        info = ModelInfo.from_dict({"id": "stale", "name": "n"}, model_id="fresh")
        assert info.id == "fresh"


class TestStorageModels:
    """Tests for storage data models."""

    def test_storage_info_to_dict(self):
        assert StorageInfo(2, 100, 1000).to_dict() == {
            "totalModels": 2,
            "totalSize": 100,
            "availableSpace": 1000,
        }

    def test_model_storage_info_to_dict(self):
        data = ModelStorageInfo(exists=True, size=5, file_count=1, files=["a"]).to_dict()
        assert data == {"exists": True, "size": 5, "fileCount": 1, "files": ["a"]}

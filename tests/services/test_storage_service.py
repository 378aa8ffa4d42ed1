"""Tests for StorageService and the ServiceFactory wiring."""

from grocery_ml.services.base import REASON_NOT_FOUND
from tests.helpers import make_bundle


class TestStorageService:
    def test_status(self, factory):
        factory.store.save(make_bundle())

        status = factory.storage.get_status().data

        assert status["status"] == "ready"
        assert status["modelsCount"] == 1
        assert status["totalSize"] > 374024
        assert status["availableSpace"] == 10 * 1024 ** 3

    def test_storage_info(self, factory):
        info = factory.storage.get_storage_info().data

        assert info.total_models == 0

    def test_summary(self, factory):
        summary = factory.storage.get_storage_summary().data

        assert summary.available_space_gb == 10.0

    def test_model_info(self, factory):
        factory.store.save(make_bundle())

        result = factory.storage.get_model_info("test-model")

        assert result.success
        assert result.data.file_count == 5

    def test_missing_model_info(self, factory):
        result = factory.storage.get_model_info("missing")

        assert not result.success
        assert result.reason == REASON_NOT_FOUND


class TestFactory:
    def test_services_share_one_store(self, factory, store_root):
        assert factory.training.store is factory.store
        assert factory.models.store is factory.store
        assert factory.export.store is factory.store
        assert factory.store.root == store_root

    def test_trained_model_is_visible_to_other_services(self, factory, dataset):
        outcome = factory.training.train_sync(dataset).data

        assert [m.id for m in factory.models.list_models().data] == [outcome.model_id]
        assert factory.storage.get_storage_info().data.total_models == 1

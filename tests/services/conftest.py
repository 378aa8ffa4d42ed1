"""Shared fixtures for service tests."""

import pytest

from grocery_ml.core.model_store import ModelStore
from grocery_ml.services.training import TrainingService
from tests.helpers import no_sleep
from tests.mocks.mock_repository import MockFileRepository


@pytest.fixture
def mock_repository() -> MockFileRepository:
    """Create a mock file repository for testing."""
    return MockFileRepository()


@pytest.fixture
def memory_store(mock_repository) -> ModelStore:
    """ModelStore over the mock repository."""
    return ModelStore("models", repository=mock_repository)


@pytest.fixture
def training_service(store, test_config) -> TrainingService:
    """TrainingService with no epoch delay and a fixed clock."""
    return TrainingService(
        store,
        config=test_config,
        sleep=no_sleep,
        clock=lambda: 1714566645.0,
    )

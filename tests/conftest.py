# tests/conftest.py
"""
Global pytest fixtures for grocery_ml tests.
"""

import numpy as np
import pytest

from tests.helpers import IMAGE_DATA_URL, make_bundle, make_dataset


@pytest.fixture(autouse=True)
def reset_globals():
    """Clear the global config and CLI factory between tests."""
    yield
    from grocery_ml.cli.service_helpers import reset_factory
    from grocery_ml.core.config import reset_config

    reset_config()
    reset_factory()


@pytest.fixture
def image_data_url() -> str:
    """A valid PNG data URL."""
    return IMAGE_DATA_URL


@pytest.fixture
def dataset():
    """Two balanced classes of 12 images each."""
    return make_dataset({"Apples": 12, "Oranges": 12})


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def bundle():
    """A generated bundle for the two-class dataset."""
    return make_bundle()


@pytest.fixture
def store_root(tmp_path):
    """Directory used as the model store root."""
    return tmp_path / "stored-models"


@pytest.fixture
def store(store_root):
    """ModelStore over a temporary directory."""
    from grocery_ml.core.model_store import ModelStore

    return ModelStore(store_root)


@pytest.fixture
def test_config(store_root):
    """Default config with a temporary store and no epoch delay."""
    from grocery_ml.core.config import get_default_config

    config = get_default_config()
    config.set("storage", "root", str(store_root))
    config.set("training", "epoch_delay_min_ms", 0)
    config.set("training", "epoch_delay_max_ms", 0)
    config.set("training", "seed", 7)
    return config


@pytest.fixture
def factory(test_config):
    """ServiceFactory wired to the temporary store."""
    from grocery_ml.services import ServiceFactory

    return ServiceFactory(config=test_config)

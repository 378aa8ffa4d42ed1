"""Test data builders shared across the suite."""

import asyncio
import base64
from datetime import datetime, timezone

import numpy as np

from grocery_ml.core.artifacts import generate_bundle
from grocery_ml.core.executor import run_epoch_loop
from grocery_ml.models.training import TrainingClass, TrainingDataset

# A PNG signature followed by filler; decodes to well over the 100-byte minimum
IMAGE_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256))
IMAGE_DATA_URL = "data:image/png;base64," + base64.b64encode(IMAGE_BYTES).decode("ascii")

CREATED_AT = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


async def no_sleep(seconds: float) -> None:
    """Drop-in for asyncio.sleep that returns immediately."""
    return None


def make_dataset(counts) -> TrainingDataset:
    """Build a TrainingDataset from ``{class name: image count}``."""
    return TrainingDataset(
        classes=[
            TrainingClass(name=name, images=[IMAGE_DATA_URL] * count)
            for name, count in counts.items()
        ]
    )


def make_bundle(model_id="test-model", counts=None, seed=42, created_at=CREATED_AT):
    """Run the epoch loop for a dataset and build its bundle."""
    dataset = make_dataset(counts or {"Apples": 12, "Oranges": 12})
    rng = np.random.default_rng(seed)
    history = asyncio.run(run_epoch_loop(dataset, rng, sleep=no_sleep))
    return generate_bundle(dataset, history, model_id, rng, created_at=created_at)

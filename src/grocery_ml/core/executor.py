# core/executor.py
"""
Synthetic Training Executor
===========================

Produces a per-epoch metrics history from the shape of a dataset.

No model is fitted. Accuracy follows a sigmoid learning curve from chance
level (``1 / num_classes``) toward a target that grows with dataset size;
loss falls along the same curve. Validation metrics are the training
metrics scaled by a random factor drawn from the injected generator, so a
seeded ``numpy.random.Generator`` yields an exact, repeatable history.

The epoch loop awaits a randomized delay before each epoch. That await is
the only suspension point, which lets an event loop interleave other work
(HTTP requests, progress rendering) while a run is in flight. A run has no
cancellation hook and always completes.

Usage:
    import asyncio
    import numpy as np
    from grocery_ml.core.executor import execute_training

    run = asyncio.run(execute_training(dataset, rng=np.random.default_rng(42)))
    print(run.model_id, run.epochs, run.final_metrics.accuracy)
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

import numpy as np

from grocery_ml.core.config import DEFAULT_CONFIG, Config
from grocery_ml.core.logger import get_logger
from grocery_ml.models.training import (
    EpochMetrics,
    ProgressMetrics,
    TrainingDataset,
    TrainingHistory,
    TrainingProgress,
    TrainingRun,
)

logger = get_logger(__name__)

_DEFAULTS = DEFAULT_CONFIG["training"]

MODEL_ID_PREFIX = "grocery-model"

# Mock progress snapshot constants
PROGRESS_TOTAL_EPOCHS = 20
PROGRESS_MS_PER_PERCENT = 200

# Called after each epoch with the epoch's metrics and the epoch count
EpochCallback = Callable[[EpochMetrics, int], None]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class TrainingConfig:
    """Settings for the synthetic epoch loop."""

    max_epochs: int = _DEFAULTS["max_epochs"]
    epoch_delay_min_ms: float = _DEFAULTS["epoch_delay_min_ms"]
    epoch_delay_max_ms: float = _DEFAULTS["epoch_delay_max_ms"]
    seed: Optional[int] = None

    @property
    def delay_range_ms(self) -> Tuple[float, float]:
        return (self.epoch_delay_min_ms, self.epoch_delay_max_ms)

    def make_rng(self) -> np.random.Generator:
        """Return a generator seeded from ``seed`` (fresh entropy when None)."""
        return np.random.default_rng(self.seed)

    @classmethod
    def from_config(cls, config: Config) -> "TrainingConfig":
        """Build from the ``[training]`` section of a Config."""
        section = config.training or {}
        seed = section.get("seed")
        return cls(
            max_epochs=int(section.get("max_epochs", cls.max_epochs)),
            epoch_delay_min_ms=float(section.get("epoch_delay_min_ms", cls.epoch_delay_min_ms)),
            epoch_delay_max_ms=float(section.get("epoch_delay_max_ms", cls.epoch_delay_max_ms)),
            seed=int(seed) if seed is not None else None,
        )


def compute_epoch_count(total_images: int, num_classes: int, max_epochs: int = 30) -> int:
    """
    Choose the epoch count from dataset shape.

    Base 15; 10 below 50 images, 25 above 200 images; 5 more when there are
    over 5 classes; never above ``max_epochs``.
    """
    epochs = 15
    if total_images < 50:
        epochs = 10
    elif total_images > 200:
        epochs = 25

    if num_classes > 5:
        epochs += 5

    return min(epochs, max_epochs)


def learning_curve(progress: float) -> float:
    """Sigmoid centred on the middle of the run."""
    return 1.0 / (1.0 + math.exp(-8.0 * (progress - 0.5)))


def calculate_epoch_metrics(
    epoch: int,
    total_epochs: int,
    num_classes: int,
    total_images: int,
    rng: np.random.Generator,
) -> EpochMetrics:
    """
    Compute the metrics for one zero-based epoch.

    Args:
        epoch: Zero-based epoch index
        total_epochs: Epoch count for the run
        num_classes: Number of classes in the dataset
        total_images: Number of images in the dataset
        rng: Random source for the validation jitter

    Returns:
        EpochMetrics with a 1-based ``epoch`` and values rounded to 4 places
    """
    progress = epoch / total_epochs
    base_accuracy = 1.0 / num_classes
    target_accuracy = min(0.95, 0.85 + total_images / 1000)
    curve = learning_curve(progress)

    accuracy = base_accuracy + (target_accuracy - base_accuracy) * curve
    loss = max(0.05, 2.5 * (1 - curve))

    val_accuracy = accuracy * (0.90 + rng.random() * 0.08)
    val_loss = loss * (1.10 + rng.random() * 0.20)

    return EpochMetrics(
        epoch=epoch + 1,
        loss=round(loss, 4),
        accuracy=round(accuracy, 4),
        val_loss=round(val_loss, 4),
        val_accuracy=round(val_accuracy, 4),
    )


async def run_epoch_loop(
    dataset: TrainingDataset,
    rng: np.random.Generator,
    sleep: SleepFunc = asyncio.sleep,
    delay_range_ms: Tuple[float, float] = (100, 500),
    on_epoch: Optional[EpochCallback] = None,
    max_epochs: int = 30,
) -> TrainingHistory:
    """
    Run the synthetic epoch loop for a validated dataset.

    Args:
        dataset: Validated training dataset
        rng: Random source for delays and validation jitter
        sleep: Awaitable sleep taking seconds; the loop's only suspension point
        delay_range_ms: Per-epoch delay bounds in milliseconds
        on_epoch: Optional callback invoked after each epoch
        max_epochs: Upper bound on the epoch count

    Returns:
        TrainingHistory whose four sequences all have the epoch count length
    """
    num_classes = dataset.num_classes
    total_images = dataset.total_images
    epochs = compute_epoch_count(total_images, num_classes, max_epochs)
    low, high = delay_range_ms

    history = TrainingHistory()
    for epoch in range(epochs):
        await sleep(rng.uniform(low, high) / 1000.0)

        metrics = calculate_epoch_metrics(epoch, epochs, num_classes, total_images, rng)
        history.append(metrics)

        if epoch % 5 == 0 or epoch == epochs - 1:
            logger.info(
                f"Epoch {epoch + 1}/{epochs}: loss={metrics.loss:.4f}, "
                f"accuracy={metrics.accuracy:.4f}"
            )

        if on_epoch is not None:
            on_epoch(metrics, epochs)

    return history


def generate_model_id(clock: Callable[[], float] = time.time) -> str:
    """Return ``grocery-model-<epoch milliseconds>``."""
    return f"{MODEL_ID_PREFIX}-{int(clock() * 1000)}"


async def execute_training(
    dataset: TrainingDataset,
    rng: Optional[np.random.Generator] = None,
    config: Optional[TrainingConfig] = None,
    sleep: SleepFunc = asyncio.sleep,
    on_epoch: Optional[EpochCallback] = None,
    clock: Callable[[], float] = time.time,
) -> TrainingRun:
    """
    Run a full synthetic training pass.

    The model id is derived from ``clock`` and is not checked for uniqueness.

    Args:
        dataset: Validated training dataset
        rng: Random source (built from ``config.seed`` when omitted)
        config: Epoch loop settings
        sleep: Awaitable sleep used between epochs
        on_epoch: Optional per-epoch callback
        clock: Returns the current time in seconds

    Returns:
        TrainingRun with the model id, history, and final-epoch metrics
    """
    config = config or TrainingConfig()
    rng = rng if rng is not None else config.make_rng()
    model_id = generate_model_id(clock)

    logger.info(
        f"Starting training {model_id}: {dataset.num_classes} classes, "
        f"{dataset.total_images} images"
    )

    history = await run_epoch_loop(
        dataset,
        rng,
        sleep=sleep,
        delay_range_ms=config.delay_range_ms,
        on_epoch=on_epoch,
        max_epochs=config.max_epochs,
    )
    final_metrics = history.final_metrics()

    logger.info(
        f"Training {model_id} complete: {len(history)} epochs, "
        f"accuracy={final_metrics.accuracy}, loss={final_metrics.loss}"
    )

    return TrainingRun(model_id=model_id, history=history, final_metrics=final_metrics)


def get_training_progress(
    training_id: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
) -> TrainingProgress:
    """
    Return a randomized progress snapshot.

    There is no job table behind this: ``training_id`` is accepted and
    ignored, and the snapshot is unrelated to any run in flight.
    """
    rng = rng if rng is not None else np.random.default_rng()

    progress = int(rng.integers(0, 100))
    current_epoch = math.floor(progress / 100 * PROGRESS_TOTAL_EPOCHS)

    return TrainingProgress(
        progress=progress,
        current_epoch=current_epoch,
        total_epochs=PROGRESS_TOTAL_EPOCHS,
        estimated_time_remaining=max(0, (100 - progress) * PROGRESS_MS_PER_PERCENT),
        metrics=ProgressMetrics(
            loss=round(max(0.1, 2.0 - current_epoch * 0.08), 4),
            accuracy=round(min(0.95, 0.3 + current_epoch * 0.032), 4),
        ),
    )

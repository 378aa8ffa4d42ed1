# services/training.py
"""
Service for dataset validation and synthetic training runs.
"""

import asyncio
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from grocery_ml.core.artifacts import generate_bundle, generate_untrained_bundle
from grocery_ml.core.config import Config, get_config
from grocery_ml.core.datasets import load_dataset
from grocery_ml.core.exceptions import DatasetLoadError
from grocery_ml.core.executor import (
    SleepFunc,
    TrainingConfig,
    execute_training,
    generate_model_id,
    get_training_progress,
)
from grocery_ml.core.logger import get_logger
from grocery_ml.core.model_store import ModelStore
from grocery_ml.core.validation import (
    ValidationConfig,
    ValidationResult,
    get_training_stats,
    validate_training_data,
)
from grocery_ml.models.artifact import ModelBundle
from grocery_ml.models.training import (
    EpochMetrics,
    TrainingDataset,
    TrainingHistory,
    TrainingProgress,
    TrainingStats,
)

from .base import (
    REASON_STORAGE,
    REASON_VALIDATION,
    BaseService,
    EpochProgress,
    ServiceResult,
)

logger = get_logger(__name__)


@dataclass
class TrainingOutcome:
    """A completed and saved training run."""

    model_id: str
    metrics: EpochMetrics
    history: TrainingHistory
    bundle: ModelBundle
    model_path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelId": self.model_id,
            "metrics": self.metrics.to_dict(),
            "history": self.history.to_dict(),
            "modelPath": str(self.model_path),
        }


class TrainingService(BaseService):
    """
    Service for validating datasets and running synthetic training.

    A run validates the dataset, executes the epoch loop, generates the
    model bundle, and saves it to the store.
    """

    def __init__(
        self,
        store: ModelStore,
        config: Optional[Config] = None,
        file_repository=None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(file_repository)
        config = config or get_config()
        self.store = store
        self.validation_config = ValidationConfig.from_config(config)
        self.training_config = TrainingConfig.from_config(config)
        self._sleep = sleep
        self._clock = clock

    def _make_rng(self, seed: Optional[int] = None) -> np.random.Generator:
        if seed is not None:
            return np.random.default_rng(seed)
        return self.training_config.make_rng()

    def load_dataset(self, path: Union[str, Path]) -> ServiceResult[TrainingDataset]:
        """
        Load a dataset from a JSON file or class directory.

        Args:
            path: Dataset file or directory

        Returns:
            ServiceResult containing the (unvalidated) TrainingDataset
        """
        try:
            dataset = load_dataset(path, self.file_repository)
        except DatasetLoadError as e:
            return ServiceResult.fail(str(e), reason=REASON_VALIDATION)

        return ServiceResult.ok(
            data=dataset,
            message=f"Loaded {dataset.num_classes} classes, {dataset.total_images} images",
        )

    def validate(self, dataset: TrainingDataset) -> ServiceResult[ValidationResult]:
        """
        Validate a dataset.

        Returns:
            ServiceResult that fails with the first violated rule
        """
        result = validate_training_data(dataset, self.validation_config)
        if not result.is_valid:
            return ServiceResult.fail(result.error, reason=REASON_VALIDATION)
        return ServiceResult.ok(data=result, message="Training data is valid")

    def get_stats(self, dataset: TrainingDataset) -> ServiceResult[TrainingStats]:
        """Summarize class and image counts."""
        if dataset.num_classes == 0:
            return ServiceResult.fail("Dataset has no classes", reason=REASON_VALIDATION)
        return ServiceResult.ok(data=get_training_stats(dataset))

    async def train(
        self,
        dataset: TrainingDataset,
        seed: Optional[int] = None,
        delay: bool = True,
    ) -> ServiceResult[TrainingOutcome]:
        """
        Validate, train, generate, and save a model.

        Args:
            dataset: Classes and images to train on
            seed: Optional seed overriding the configured one
            delay: Wait the configured per-epoch delay (zero when False)

        Returns:
            ServiceResult containing the TrainingOutcome
        """
        validation = self.validate(dataset)
        if not validation.success:
            return ServiceResult.fail(validation.error, reason=REASON_VALIDATION)

        rng = self._make_rng(seed)
        training_config = self.training_config
        if not delay:
            training_config = replace(
                training_config, epoch_delay_min_ms=0, epoch_delay_max_ms=0
            )
        progress = EpochProgress(total=0)

        def on_epoch(metrics: EpochMetrics, total: int) -> None:
            progress.total = total
            progress.completed = metrics.epoch
            progress.metrics = metrics
            self._report_progress(progress)

        run = await execute_training(
            dataset,
            rng=rng,
            config=training_config,
            sleep=self._sleep,
            on_epoch=on_epoch,
            clock=self._clock,
        )
        bundle = generate_bundle(dataset, run.history, run.model_id, rng)

        saved = self.store.save(bundle)
        if not saved.ok:
            return ServiceResult.fail(
                f"Failed to save model {run.model_id}: {saved.detail}",
                reason=REASON_STORAGE,
                status=saved.status.value,
            )

        outcome = TrainingOutcome(
            model_id=run.model_id,
            metrics=run.final_metrics,
            history=run.history,
            bundle=bundle,
            model_path=saved.value,
        )
        return ServiceResult.ok(
            data=outcome,
            message=f"Model {run.model_id} trained successfully",
            epochs=run.epochs,
        )

    def train_sync(
        self,
        dataset: TrainingDataset,
        seed: Optional[int] = None,
        delay: bool = True,
    ) -> ServiceResult[TrainingOutcome]:
        """Run ``train`` to completion on a new event loop."""
        return asyncio.run(self.train(dataset, seed=seed, delay=delay))

    def generate_untrained(
        self,
        dataset: TrainingDataset,
        model_id: Optional[str] = None,
        seed: Optional[int] = None,
        save: bool = False,
    ) -> ServiceResult[ModelBundle]:
        """
        Build a bundle without running the epoch loop.

        The dataset is not validated. The bundle carries a fixed five-epoch
        history and is only written to the store when ``save`` is set.
        """
        if dataset.num_classes == 0:
            return ServiceResult.fail("Dataset has no classes", reason=REASON_VALIDATION)

        model_id = model_id or generate_model_id(self._clock)
        bundle = generate_untrained_bundle(dataset, model_id, self._make_rng(seed))

        if save:
            saved = self.store.save(bundle)
            if not saved.ok:
                return ServiceResult.fail(
                    f"Failed to save model {model_id}: {saved.detail}",
                    reason=REASON_STORAGE,
                    status=saved.status.value,
                )

        return ServiceResult.ok(data=bundle, message=f"Generated model {model_id}")

    def get_progress(
        self,
        training_id: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> ServiceResult[TrainingProgress]:
        """
        Return a progress snapshot.

        The snapshot is randomized and not tied to any run; ``training_id``
        is accepted but has no effect.
        """
        rng = np.random.default_rng(seed)
        return ServiceResult.ok(data=get_training_progress(training_id, rng))

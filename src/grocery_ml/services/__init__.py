# services/__init__.py
"""
Services Package
================

Application services that orchestrate between views (CLI, API) and core logic.

Services provide:
- A clean interface for views to invoke operations
- Input validation and error handling
- Progress reporting and logging

Architecture:
    View (CLI/API)
        ↓ (datasets, model ids, request payloads)
    Service
        ↓ (delegates to)
    Core (validation, executor, artifacts, model store, analytics, archive)

Usage:
    from grocery_ml.services import ServiceFactory

    factory = ServiceFactory()
    dataset = factory.training.load_dataset("datasets/produce").data
    result = factory.training.train_sync(dataset)
    if result.success:
        print(result.data.model_id)
"""

from .base import BaseService, EpochProgress, ProgressCallback, ServiceResult
from .config import ConfigService
from .export import ExportPayload, ExportService
from .factory import ServiceFactory
from .models import ModelService
from .storage import StorageService
from .training import TrainingOutcome, TrainingService

__all__ = [
    "BaseService",
    "ConfigService",
    "EpochProgress",
    "ExportPayload",
    "ExportService",
    "ModelService",
    "ProgressCallback",
    "ServiceFactory",
    "ServiceResult",
    "StorageService",
    "TrainingOutcome",
    "TrainingService",
]

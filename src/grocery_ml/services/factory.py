"""
Service Factory
===============

Reusable factory for instantiating services with proper dependency injection.

This factory lives in the services layer to be reusable across all applications
(CLI, web API, tests). Applications can use it as-is or override behavior
through dependency injection.

Architecture Principle:
- Factory provides sensible defaults (LocalFileRepository, global config)
- Applications can override by passing a custom repository or Config
- All services created by one factory share a single ModelStore, so
  per-model save locking covers every caller in the process

Usage:
    # CLI usage - defaults
    from grocery_ml.services.factory import ServiceFactory

    factory = ServiceFactory()
    result = factory.training.train_sync(dataset)

    # Tests - in-memory repository and explicit config
    factory = ServiceFactory(config=config, file_repository=MockFileRepository())
"""

from typing import Optional

from grocery_ml.core.analytics import StorageAnalytics
from grocery_ml.core.config import Config, get_config
from grocery_ml.core.model_store import ModelStore
from grocery_ml.repository import LocalFileRepository
from grocery_ml.repository.protocol import FileRepositoryProtocol

from .config import ConfigService
from .export import ExportService
from .models import ModelService
from .storage import StorageService
from .training import TrainingService


class ServiceFactory:
    """
    Factory for creating service instances with proper dependency injection.

    Attributes:
        config: Configuration the services are built from
        file_repository: File repository implementation for file-based services
        store: Model store shared by all services from this factory
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        file_repository: Optional[FileRepositoryProtocol] = None,
    ):
        """
        Initialize the service factory.

        Args:
            config: Optional Config. If None, uses the global configuration.
            file_repository: Optional custom file repository. If None, uses LocalFileRepository.
        """
        self.config = config or get_config()
        self.file_repository = file_repository or LocalFileRepository()
        self.store = ModelStore(
            self.config.get("storage", "root", "stored-models"),
            repository=self.file_repository,
        )

    def create_training_service(self) -> TrainingService:
        """Create TrainingService with the shared store."""
        return TrainingService(
            self.store,
            config=self.config,
            file_repository=self.file_repository,
        )

    def create_model_service(self) -> ModelService:
        """Create ModelService with the shared store."""
        return ModelService(self.store, file_repository=self.file_repository)

    def create_storage_service(self) -> StorageService:
        """Create StorageService over the shared store."""
        analytics = StorageAnalytics.from_config(self.store, self.config)
        return StorageService(analytics, file_repository=self.file_repository)

    def create_export_service(self) -> ExportService:
        """Create ExportService with the shared store."""
        return ExportService(self.store, file_repository=self.file_repository)

    def create_config_service(self) -> ConfigService:
        """Create ConfigService (config service, has own system)."""
        return ConfigService()

    # ========================================================================
    # Property-Based Access (Convenience for CLI and other applications)
    # ========================================================================

    @property
    def training(self) -> TrainingService:
        """Convenience property for create_training_service()."""
        return self.create_training_service()

    @property
    def models(self) -> ModelService:
        """Convenience property for create_model_service()."""
        return self.create_model_service()

    @property
    def storage(self) -> StorageService:
        """Convenience property for create_storage_service()."""
        return self.create_storage_service()

    @property
    def export(self) -> ExportService:
        """Convenience property for create_export_service()."""
        return self.create_export_service()

    @property
    def config_service(self) -> ConfigService:
        """Convenience property for create_config_service()."""
        return self.create_config_service()

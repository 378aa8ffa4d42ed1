"""
CLI Service Helpers
===================

CLI-specific utilities for working with services and the ServiceFactory.

This module provides convenience functions for CLI commands to:
1. Access a singleton ServiceFactory instance
2. Handle service result errors consistently
3. Reduce boilerplate in command implementations

Usage:
    from grocery_ml.cli.service_helpers import services, handle_result

    # Access services via singleton factory
    models = handle_result(services.models.list_models())

    # Or manually check
    result = services.models.delete_model(model_id)
    if not result.success:
        exit_with_error(result.error)
"""

from typing import TYPE_CHECKING, TypeVar

import click

# LAZY IMPORT: ServiceFactory is only imported when first service is accessed
if TYPE_CHECKING:
    from grocery_ml.services import ServiceFactory
    from grocery_ml.services.base import ServiceResult
    from grocery_ml.services.config import ConfigService
    from grocery_ml.services.export import ExportService
    from grocery_ml.services.models import ModelService
    from grocery_ml.services.storage import StorageService
    from grocery_ml.services.training import TrainingService

# Type variable for generic result handling
T = TypeVar("T")


# ============================================================================
# Singleton Factory Instance
# ============================================================================

# Module-level singleton factory shared by all CLI commands
_factory: "ServiceFactory | None" = None


def get_factory() -> "ServiceFactory":
    """
    Get the singleton ServiceFactory instance for CLI.

    This is lazily initialized on first access from the global configuration.
    For testing or custom configurations, use set_factory() to inject a custom
    instance.

    Returns:
        ServiceFactory: The singleton factory instance
    """
    global _factory
    if _factory is None:
        from grocery_ml.services import ServiceFactory

        _factory = ServiceFactory()
    return _factory


def set_factory(factory: "ServiceFactory") -> None:
    """
    Set a custom ServiceFactory instance.

    Args:
        factory: Custom ServiceFactory instance to use

    Example:
        # In tests
        set_factory(ServiceFactory(config=config, file_repository=MockFileRepository()))
    """
    global _factory
    _factory = factory


def reset_factory() -> None:
    """
    Reset the singleton factory instance.

    The next service access builds a new factory from the global configuration.
    """
    global _factory
    _factory = None


class _ServiceAccessor:
    """
    Lazy accessor for services that provides type hints and autocomplete.

    Services are accessed through the singleton factory, which is only
    created when first accessed.
    """

    @property
    def training(self) -> "TrainingService":
        """Get TrainingService instance."""
        return get_factory().training

    @property
    def models(self) -> "ModelService":
        """Get ModelService instance."""
        return get_factory().models

    @property
    def storage(self) -> "StorageService":
        """Get StorageService instance."""
        return get_factory().storage

    @property
    def export(self) -> "ExportService":
        """Get ExportService instance."""
        return get_factory().export

    @property
    def config(self) -> "ConfigService":
        """Get ConfigService instance."""
        return get_factory().config_service


# Lazy service accessor - factory only created when services are actually accessed
services = _ServiceAccessor()


# ============================================================================
# Result Handling Utilities
# ============================================================================


def handle_result(result: "ServiceResult[T]") -> T:
    """
    Handle a service result, exiting with error if failed.

    Args:
        result: Service result to handle

    Returns:
        The result data if successful

    Raises:
        SystemExit: If result indicates failure (exits with code 1)
    """
    if not result.success:
        exit_with_error(result.error or "Unknown error")
    return result.data


def exit_with_error(message: str, code: int = 1) -> None:
    """
    Print error message and exit.

    Args:
        message: Error message to display
        code: Exit code (default: 1)

    Raises:
        SystemExit: Always exits with specified code
    """
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)


__all__ = [
    "services",
    "get_factory",
    "set_factory",
    "reset_factory",
    "handle_result",
    "exit_with_error",
]

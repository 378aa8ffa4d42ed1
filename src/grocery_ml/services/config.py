# services/config.py
"""
Service for configuration management operations.
"""

from pathlib import Path
from typing import List, Optional

from grocery_ml.core import config as core_config

from .base import BaseService, ServiceResult


class ConfigService(BaseService):
    """
    Service for configuration management operations.

    Provides ServiceResult-wrapped methods for configuration access
    and management.
    """

    def get_config(self) -> ServiceResult[core_config.Config]:
        """
        Get the current configuration.

        Returns:
            ServiceResult containing the Config object on success
        """
        config = core_config.get_config()
        return ServiceResult.ok(
            data=config,
            message=f"Loaded config from {config._source or 'defaults'}",
            source=config._source,
        )

    def find_config_file(
        self,
        config_path: Optional[str] = None,
    ) -> ServiceResult[Optional[str]]:
        """
        Find the configuration file to use.

        Args:
            config_path: Explicit path to check first

        Returns:
            ServiceResult containing the config file path or None
        """
        result = core_config.find_config_file(config_path)
        if result:
            return ServiceResult.ok(data=str(result), message=f"Found config file: {result}")
        return ServiceResult.ok(data=None, message="No config file found")

    def get_config_locations(self) -> ServiceResult[List[str]]:
        """
        Get configuration file search locations in priority order.

        Returns:
            ServiceResult containing list of path strings
        """
        paths = [str(loc) for loc in core_config.get_config_locations()]
        return ServiceResult.ok(data=paths, message=f"Found {len(paths)} config locations")

    def create_default_config(
        self,
        filepath: Optional[str] = None,
        force: bool = False,
    ) -> ServiceResult[str]:
        """
        Create a default configuration file.

        Args:
            filepath: Path to create the file (default: ./grocery-ml.toml)
            force: Overwrite if file exists

        Returns:
            ServiceResult containing the created file path on success
        """
        path = Path(filepath) if filepath else Path(core_config.CONFIG_FILENAME)

        if path.exists() and not force:
            return ServiceResult.fail(f"File already exists: {path}. Use force=True to overwrite.")

        try:
            result_path = core_config.create_default_config_file(str(path))
        except OSError as e:
            return ServiceResult.fail(f"Failed to create config file: {e}")

        return ServiceResult.ok(data=result_path, message=f"Created config file: {result_path}")

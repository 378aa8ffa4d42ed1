"""
Configuration Management
========================

TOML-based configuration for grocery_ml.

Configuration files are merged in the following order (highest priority last):
1. Built-in defaults
2. /etc/grocery-ml/config.toml (system config)
3. ~/.config/grocery-ml/config.toml (user config)
4. ./grocery-ml.toml (current directory)
5. Path specified via --config option

Example configuration file (grocery-ml.toml):

    [storage]
    root = "stored-models"

    [validation]
    min_classes = 2
    min_images_per_class = 10
    min_total_images = 10
    max_class_ratio = 5.0
    min_image_bytes = 100
    accepted_image_types = ["jpeg", "jpg", "png", "gif", "webp", "bmp", "tiff"]

    [training]
    max_epochs = 30
    epoch_delay_min_ms = 100
    epoch_delay_max_ms = 500
    seed = 42

    [analytics]
    available_space_bytes = 10737418240

    [logging]
    level = "WARNING"

    [server]
    host = "127.0.0.1"
    port = 8000
    cors_origins = ["*"]
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from grocery_ml.core.logger import get_logger

logger = get_logger(__name__)


# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "root": "stored-models",
    },
    "validation": {
        "min_classes": 2,
        "min_images_per_class": 10,
        "min_total_images": 10,
        "max_class_ratio": 5.0,
        "min_image_bytes": 100,
        "accepted_image_types": ["jpeg", "jpg", "png", "gif", "webp", "bmp", "tiff"],
    },
    "training": {
        "max_epochs": 30,
        "epoch_delay_min_ms": 100,
        "epoch_delay_max_ms": 500,
        "seed": None,  # None = fresh entropy per run
    },
    "analytics": {
        "available_space_bytes": 10 * 1024 * 1024 * 1024,
    },
    "logging": {
        "level": "WARNING",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
        "cors_origins": ["*"],
    },
}

CONFIG_FILENAME = "grocery-ml.toml"

# Standard config file locations, highest priority first
CONFIG_LOCATIONS = [
    Path(CONFIG_FILENAME),
    Path("~/.config/grocery-ml/config.toml").expanduser(),
    Path("/etc/grocery-ml/config.toml"),
]


@dataclass
class Config:
    """
    Configuration container for grocery_ml settings.

    Attributes:
        storage: Model store location
        validation: Dataset validation thresholds
        training: Epoch loop settings
        analytics: Storage analytics settings
        logging: Logging settings
        server: HTTP server settings
        _source: Path to the config file that was loaded
    """

    storage: Dict[str, Any] = field(default_factory=dict)
    validation: Dict[str, Any] = field(default_factory=dict)
    training: Dict[str, Any] = field(default_factory=dict)
    analytics: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    server: Dict[str, Any] = field(default_factory=dict)
    _source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        section_dict = getattr(self, section, {})
        if section_dict is None:
            return default
        return section_dict.get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        section_dict = getattr(self, section, None)
        if section_dict is not None:
            section_dict[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "storage": self.storage,
            "validation": self.validation,
            "training": self.training,
            "analytics": self.analytics,
            "logging": self.logging,
            "server": self.server,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Create Config from dictionary."""
        return cls(
            storage=data.get("storage", {}),
            validation=data.get("validation", {}),
            training=data.get("training", {}),
            analytics=data.get("analytics", {}),
            logging=data.get("logging", {}),
            server=data.get("server", {}),
            _source=source,
        )


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Args:
        filepath: Path to the TOML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If file doesn't exist
        tomllib.TOMLDecodeError: If TOML parsing fails
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with path.open("rb") as f:
        return tomllib.load(f)


def save_toml(config: Dict[str, Any], filepath: Union[str, Path]) -> str:
    """
    Save configuration to a TOML file.

    Values of None are omitted, since TOML has no null.

    Args:
        config: Configuration dictionary
        filepath: Path to save the file

    Returns:
        Path to the saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = []
    for section, values in config.items():
        if isinstance(values, dict) and values:
            lines.append(f"[{section}]")
            for key, value in values.items():
                if isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                elif isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, (int, float)):
                    lines.append(f"{key} = {value}")
                elif isinstance(value, list):
                    items = ", ".join(f'"{v}"' if isinstance(v, str) else str(v) for v in value)
                    lines.append(f"{key} = [{items}]")
            lines.append("")

    path.write_text("\n".join(lines), encoding="utf-8")

    return str(path)


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Find the configuration file to use.

    Args:
        config_path: Explicit path to config file (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if config_path:
        path = Path(config_path)
        if path.exists():
            return path
        logger.warning(f"Specified config file not found: {config_path}")
        return None

    for location in CONFIG_LOCATIONS:
        if location.exists():
            return location

    return None


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config.from_dict(_deep_copy_dict(DEFAULT_CONFIG))


def create_default_config_file(filepath: Optional[str] = None) -> str:
    """
    Create a default configuration file.

    Args:
        filepath: Path to create the file (default: ./grocery-ml.toml)

    Returns:
        Path to the created file
    """
    if filepath is None:
        filepath = CONFIG_FILENAME

    return save_toml(DEFAULT_CONFIG, filepath)


def _deep_copy_dict(d: Dict[str, Any]) -> Dict[str, Any]:
    """Create a deep copy of a dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy_dict(value)
        elif isinstance(value, list):
            result[key] = value.copy()
        else:
            result[key] = value
    return result


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two dictionaries, with override taking precedence."""
    result = _deep_copy_dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


# Global configuration instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config_cascade()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to None (will reload on next access)."""
    global _global_config
    _global_config = None


def get_config_locations() -> List[Path]:
    """
    Get configuration file search locations in priority order.

    Returns:
        List of paths to search, in priority order (highest first)
    """
    return CONFIG_LOCATIONS.copy()


def load_config_cascade(explicit_path: Optional[str] = None) -> Config:
    """
    Load configuration with full cascade support.

    Merges configs from all levels in priority order:
    defaults -> system -> user -> current dir -> explicit

    Higher priority configs override lower priority ones. A file that fails
    to parse is logged and skipped.

    Args:
        explicit_path: Explicit config file path (highest priority)

    Returns:
        Config object with merged settings from all sources
    """
    config_data = _deep_copy_dict(DEFAULT_CONFIG)
    source = None

    # Load in reverse order (lowest to highest priority) so higher overrides lower
    for location in reversed(get_config_locations()):
        if location.exists():
            try:
                config_data = _merge_dicts(config_data, load_toml(location))
                source = str(location)
                logger.debug(f"Merged configuration from {location}")
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Error loading {location}: {e}")

    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            try:
                config_data = _merge_dicts(config_data, load_toml(path))
                source = str(path)
                logger.debug(f"Merged configuration from {path}")
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Error loading {path}: {e}")
        else:
            logger.warning(f"Specified config file not found: {explicit_path}")

    return Config.from_dict(config_data, source=source)

"""Project configuration with file and environment variable loading."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "COMPONENT_ENV_"
PROJECT_CONFIG = Path(".component-env") / "config.yaml"


class GraphConfig(BaseModel):
    """Configuration for building and watching a component environment graph."""

    model_config = ConfigDict(extra="ignore")

    tsconfig_path: Optional[str] = Field(
        default=None,
        description="Module-resolution config (default <root>/tsconfig.json)",
    )
    exclude: List[str] = Field(
        default_factory=list,
        description="Exclusion patterns appended to the defaults",
    )
    debounce_seconds: float = Field(
        default=0.3,
        ge=0.0,
        description="Window used to batch file change events",
    )
    debug: bool = Field(default=False, description="Log every node after each build")


def get_config_paths(root_dir: str) -> List[Path]:
    """
    Get configuration file paths in priority order.

    Returns:
        List of paths, highest priority last
    """
    return [Path(root_dir) / PROJECT_CONFIG]


def load_config(root_dir: str, config_path: Optional[str] = None) -> GraphConfig:
    """
    Load graph configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Default values
    2. Project config (<root>/.component-env/config.yaml)
    3. Explicit config_path if provided
    4. Environment variables (COMPONENT_ENV_*)

    Args:
        root_dir: Project root directory
        config_path: Optional explicit config file path

    Returns:
        Merged GraphConfig instance

    Raises:
        ConfigurationError: If a config file is unreadable or invalid
    """
    merged_config: Dict[str, Any] = {}

    config_paths = get_config_paths(root_dir)
    if config_path:
        explicit = Path(config_path)
        if not explicit.exists():
            raise ConfigurationError(f"Config file not found: {explicit}")
        config_paths.append(explicit)

    for path in config_paths:
        if not path.exists():
            continue
        try:
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        # Only merge 'graph' section if present, otherwise use whole file
        section = file_config.get("graph", file_config)
        merged_config.update(section or {})
        logger.debug(f"Loaded config from {path}")

    merged_config.update(_get_env_overrides())

    try:
        return GraphConfig(**merged_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _get_env_overrides() -> Dict[str, Any]:
    """
    Get configuration overrides from environment variables.

    Environment variables are prefixed with COMPONENT_ENV_.
    COMPONENT_ENV_DEBUG is true for "true", "1" or "yes".
    COMPONENT_ENV_EXCLUDE is a comma-separated pattern list.

    Returns:
        Dictionary of overrides
    """
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        # Convert key: COMPONENT_ENV_DEBOUNCE_SECONDS -> debounce_seconds
        config_key = key[len(ENV_PREFIX) :].lower()

        if config_key == "exclude":
            overrides[config_key] = [p.strip() for p in value.split(",") if p.strip()]
        elif config_key == "tsconfig":
            overrides["tsconfig_path"] = value
        elif config_key == "debug":
            overrides[config_key] = value.lower() in ("true", "1", "yes")
        else:
            try:
                overrides[config_key] = float(value)
            except ValueError:
                overrides[config_key] = value

    return overrides

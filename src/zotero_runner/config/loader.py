"""Configuration loading and validation."""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from zotero_runner.config.schema import RunnerConfig
from zotero_runner.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path("zotero-runner.yaml")


def load_config(path: Optional[Union[str, Path]] = None) -> RunnerConfig:
    """Load and validate runner configuration from a YAML file.

    Args:
        path: Path to config file. If None, uses ./zotero-runner.yaml.

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    elif isinstance(path, str):
        path = Path(path)

    # A run needs at least a binary and a profile, so there is no zero-config mode
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, "r") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return RunnerConfig(**config_data)

    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
    except Exception as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e


def save_config(config: RunnerConfig, path: Optional[Union[str, Path]] = None) -> None:
    """Save configuration to a YAML file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    elif isinstance(path, str):
        path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

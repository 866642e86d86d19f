"""Configuration models and loader."""

from zotero_runner.config.loader import DEFAULT_CONFIG_PATH, load_config, save_config
from zotero_runner.config.schema import PluginConfig, RunnerConfig

__all__ = ["DEFAULT_CONFIG_PATH", "PluginConfig", "RunnerConfig", "load_config", "save_config"]

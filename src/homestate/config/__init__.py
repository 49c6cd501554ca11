"""Configuration loading."""
from .settings import (
    StateConfig,
    ConfigError,
    load_config,
    find_config_file,
    DEFAULT_STATE_FILE,
)

__all__ = ["StateConfig", "ConfigError", "load_config", "find_config_file", "DEFAULT_STATE_FILE"]

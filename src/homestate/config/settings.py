"""homestate configuration.

Settings come from an optional YAML file, then environment variables:

- HOMESTATE_STATE_FILE: Path to the state database
- HOMESTATE_DRY_RUN_READ_YOUR_WRITES: Set to "1" to shadow dry-run writes
- HOMESTATE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- HOMESTATE_LOG_FILE: Path to log file

Example homestate.yaml:

    state_file: ~/.config/homestate/homestate-state.sqlite3
    read_your_writes: false
    log_level: INFO
"""
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "homestate"
DEFAULT_STATE_FILE = DEFAULT_CONFIG_DIR / "homestate-state.sqlite3"
DEFAULT_LOG_FILE = DEFAULT_CONFIG_DIR / "homestate.log"


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""
    pass


@dataclass
class StateConfig:
    """Settings for persistent state and logging."""
    state_file: Path = field(default_factory=lambda: DEFAULT_STATE_FILE)
    read_your_writes: bool = False
    log_level: str = "INFO"
    log_file: Path = field(default_factory=lambda: DEFAULT_LOG_FILE)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StateConfig":
        """Load settings from a YAML file. Unknown keys are rejected."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

        config = cls()
        if "state_file" in data:
            config.state_file = Path(os.path.expanduser(str(data["state_file"])))
        if "read_your_writes" in data:
            if not isinstance(data["read_your_writes"], bool):
                raise ConfigError(
                    f"read_your_writes in {path} must be true or false, "
                    f"got {data['read_your_writes']!r}"
                )
            config.read_your_writes = data["read_your_writes"]
        if "log_level" in data:
            config.log_level = str(data["log_level"]).upper()
        if "log_file" in data:
            config.log_file = Path(os.path.expanduser(str(data["log_file"])))

        logger.debug(f"Loaded config from {path}")
        return config

    @classmethod
    def from_env(cls, base: Optional["StateConfig"] = None) -> "StateConfig":
        """Apply environment overrides on top of base (or defaults)."""
        config = replace(base) if base is not None else cls()

        state_file = os.environ.get("HOMESTATE_STATE_FILE")
        if state_file:
            config.state_file = Path(os.path.expanduser(state_file))

        read_your_writes = os.environ.get("HOMESTATE_DRY_RUN_READ_YOUR_WRITES")
        if read_your_writes is not None:
            config.read_your_writes = read_your_writes == "1"

        log_level = os.environ.get("HOMESTATE_LOG_LEVEL")
        if log_level:
            config.log_level = log_level.upper()

        log_file = os.environ.get("HOMESTATE_LOG_FILE")
        if log_file:
            config.log_file = Path(os.path.expanduser(log_file))

        return config


def find_config_file() -> Optional[Path]:
    """Find homestate.yaml in the working directory or the config directory."""
    search_paths = [
        Path.cwd() / "homestate.yaml",
        DEFAULT_CONFIG_DIR / "homestate.yaml",
    ]
    for path in search_paths:
        if path.exists():
            return path
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> StateConfig:
    """
    Load settings.

    Args:
        path: Explicit config file. If None, search the default locations;
            missing files there are not an error.

    Returns:
        StateConfig with environment overrides applied
    """
    if path is None:
        path = find_config_file()
    elif not Path(path).exists():
        raise ConfigError(f"Config file not found: {path}")

    base = StateConfig.from_file(path) if path is not None else StateConfig()
    return StateConfig.from_env(base)

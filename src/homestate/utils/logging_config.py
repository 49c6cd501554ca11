"""Logging configuration for homestate.

Provides:
- Console output at the configured level
- File-based logging with rotation (captures everything)
- A dedicated logger for persistent state call tracing

Environment Variables:
    HOMESTATE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    HOMESTATE_LOG_FILE: Path to log file (default: ~/.config/homestate/homestate.log)
    HOMESTATE_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    HOMESTATE_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from homestate.utils.logging_config import setup_logging, state_logger

    setup_logging()  # Call once at startup
    stack = build_state_stack(path, debug_logger=state_logger)
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

main_logger = logging.getLogger("homestate")
# Sink for DebugPersistentState, separate for easy filtering
state_logger = logging.getLogger("homestate.state")


def get_log_level(level: Optional[str] = None) -> int:
    """Get log level from argument or environment."""
    level_str = (level or os.environ.get("HOMESTATE_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".config" / "homestate" / "homestate.log"
    path_str = os.environ.get("HOMESTATE_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects HOMESTATE_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)

    Calling it again replaces the handlers installed by the previous call.
    """
    log_level = get_log_level(level)
    log_file = Path(log_file) if log_file else get_log_file()
    max_size_mb = int(os.environ.get("HOMESTATE_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("HOMESTATE_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    for handler in list(main_logger.handlers):
        main_logger.removeHandler(handler)
        handler.close()

    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    main_logger.debug(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")

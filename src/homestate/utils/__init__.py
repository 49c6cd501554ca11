"""Utility modules."""
from .logging_config import (
    setup_logging,
    get_log_level,
    get_log_file,
    main_logger,
    state_logger,
)

__all__ = [
    "setup_logging",
    "get_log_level",
    "get_log_file",
    "main_logger",
    "state_logger",
]

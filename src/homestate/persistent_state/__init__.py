"""Persistent state package for recorded entry and script state.

This package provides:
- PersistentState: The bucketed key-value protocol
- SqlitePersistentState: The durable store, one SQLite file
- NullPersistentState: A store that records nothing
- ReadOnlyPersistentState / DryRunPersistentState / DebugPersistentState:
  wrappers that reject, drop, or log writes
- build_state_stack: Compose the wrappers for one invocation
"""

from .base import PersistentState, Visitor
from .debug import DebugPersistentState
from .dry_run import DryRunPersistentState
from .errors import (
    PersistentStateError,
    StateIOError,
    StateNotOpenError,
    StatePermissionError,
)
from .null_state import NullPersistentState
from .read_only import ReadOnlyPersistentState
from .sqlite_state import SqlitePersistentState
from .stack import StateMode, StateStack, build_state_stack

__all__ = [
    "PersistentState",
    "Visitor",
    "SqlitePersistentState",
    "NullPersistentState",
    "ReadOnlyPersistentState",
    "DryRunPersistentState",
    "DebugPersistentState",
    "StateMode",
    "StateStack",
    "build_state_stack",
    "PersistentStateError",
    "StateIOError",
    "StateNotOpenError",
    "StatePermissionError",
]

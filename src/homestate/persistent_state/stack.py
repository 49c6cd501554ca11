"""Composition of persistent state wrappers for one invocation.

A command builds exactly one StateStack and hands ``stack.state`` to every
collaborator that needs recorded state. Layers, innermost first:

    SqlitePersistentState | NullPersistentState
    DryRunPersistentState or ReadOnlyPersistentState  (optional)
    DebugPersistentState                               (optional, outermost)
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .base import PersistentState
from .debug import DebugPersistentState
from .dry_run import DryRunPersistentState
from .null_state import NullPersistentState
from .read_only import ReadOnlyPersistentState
from .sqlite_state import SqlitePersistentState

logger = logging.getLogger(__name__)


class StateMode(str, Enum):
    """How recorded state is treated during an invocation."""
    NORMAL = "normal"        # Read and write the state file
    DRY_RUN = "dry_run"      # Read the state file, drop writes
    READ_ONLY = "read_only"  # Read the state file, reject writes
    NULL = "null"            # No state file at all


@dataclass
class StateStack:
    """The composed store for one invocation plus handles on its layers."""
    state: PersistentState
    mode: StateMode
    backing: Optional[SqlitePersistentState] = None
    dry_run: Optional[DryRunPersistentState] = None

    @property
    def modified(self) -> bool:
        """True if a dry run attempted to modify recorded state."""
        return self.dry_run is not None and self.dry_run.modified

    def open(self) -> PersistentState:
        """Open the backing store and return the outermost layer."""
        self.state.open_or_create()
        return self.state

    def close(self) -> None:
        if self.backing is not None:
            self.backing.close()

    def __enter__(self) -> PersistentState:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def build_state_stack(
    state_file: Union[str, Path, None],
    mode: StateMode = StateMode.NORMAL,
    debug_logger: Optional[logging.Logger] = None,
    read_your_writes: bool = False,
) -> StateStack:
    """
    Build the persistent state for one invocation.

    Args:
        state_file: SQLite state file (ignored in NULL mode)
        mode: Which write semantics to apply
        debug_logger: If given, log every call to this logger
        read_your_writes: In DRY_RUN mode, shadow dropped writes for reads

    Returns:
        StateStack whose ``state`` is the outermost layer
    """
    mode = StateMode(mode)
    backing: Optional[SqlitePersistentState] = None
    dry_run: Optional[DryRunPersistentState] = None

    if mode == StateMode.NULL:
        state: PersistentState = NullPersistentState()
    else:
        if state_file is None:
            raise ValueError(f"state_file is required in {mode.value} mode")
        backing = SqlitePersistentState(state_file)
        if mode == StateMode.DRY_RUN:
            dry_run = DryRunPersistentState(backing, read_your_writes=read_your_writes)
            state = dry_run
        elif mode == StateMode.READ_ONLY:
            state = ReadOnlyPersistentState(backing)
        else:
            state = backing

    if debug_logger is not None:
        state = DebugPersistentState(state, debug_logger)

    logger.debug(
        f"Built persistent state: mode={mode.value}, "
        f"file={state_file}, debug={debug_logger is not None}"
    )
    return StateStack(state=state, mode=mode, backing=backing, dry_run=dry_run)

"""Entry and script state tracking on top of persistent state."""
from .entry_state import EntryStateLedger, EntryStatus, classify
from .records import (
    ENTRY_STATE_BUCKET,
    SCRIPT_STATE_BUCKET,
    SCRIPT_ONCHANGE_STATE_BUCKET,
    EntryState,
    ScriptState,
    StateRecordError,
    sha256_hex,
)
from .script_state import RunCondition, ScriptRunTracker

__all__ = [
    "EntryStateLedger",
    "EntryStatus",
    "classify",
    "EntryState",
    "ScriptState",
    "StateRecordError",
    "sha256_hex",
    "ENTRY_STATE_BUCKET",
    "SCRIPT_STATE_BUCKET",
    "SCRIPT_ONCHANGE_STATE_BUCKET",
    "RunCondition",
    "ScriptRunTracker",
]

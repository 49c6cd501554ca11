"""Applied-state records for destination entries.

The reconciliation engine compares three things for each destination path:
the source (what should be there), the destination (what is there) and the
record of what was last applied. This module owns the record.
"""
import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..persistent_state import PersistentState
from .records import ENTRY_STATE_BUCKET, EntryState

logger = logging.getLogger(__name__)


class EntryStatus(str, Enum):
    """Outcome of comparing source, destination and recorded state."""
    UNCHANGED = "unchanged"
    NEEDS_UPDATE = "needs_update"
    EXTERNALLY_MODIFIED = "externally_modified"


def classify(
    source_sha256: str,
    dest_sha256: Optional[str],
    recorded: Optional[EntryState],
) -> EntryStatus:
    """
    Decide what to do with one destination entry.

    Args:
        source_sha256: Hash of the desired contents
        dest_sha256: Hash of the current destination contents, None if absent
        recorded: Last applied state, None if never applied

    Returns:
        UNCHANGED if the destination already matches the source,
        EXTERNALLY_MODIFIED if the destination changed since it was last
        applied, NEEDS_UPDATE otherwise
    """
    if dest_sha256 == source_sha256:
        return EntryStatus.UNCHANGED
    if (
        recorded is not None
        and dest_sha256 is not None
        and dest_sha256 != recorded.contents_sha256
    ):
        return EntryStatus.EXTERNALLY_MODIFIED
    return EntryStatus.NEEDS_UPDATE


class EntryStateLedger:
    """Reads and writes entry state records keyed by destination path."""

    def __init__(self, state: PersistentState):
        self.state = state

    def get(self, path: str) -> Optional[EntryState]:
        """Get the recorded state for path, None if never recorded."""
        data = self.state.get(ENTRY_STATE_BUCKET, path.encode())
        if not data:
            return None
        return EntryState.from_json(data)

    def record(self, path: str, entry: EntryState) -> None:
        """Record entry as the applied state of path."""
        if entry.updated_at is None:
            entry = replace(entry, updated_at=datetime.now(timezone.utc).isoformat())
        self.state.set(ENTRY_STATE_BUCKET, path.encode(), entry.to_json())
        logger.debug(f"Recorded {entry.type} state for {path}")

    def forget(self, path: str) -> None:
        """Drop the record for path."""
        self.state.delete(ENTRY_STATE_BUCKET, path.encode())

    def entries(self) -> dict[str, EntryState]:
        """All recorded entries by path."""
        result: dict[str, EntryState] = {}

        def visit(key: bytes, value: bytes) -> None:
            result[key.decode("utf-8", "backslashreplace")] = EntryState.from_json(value)

        self.state.for_each(ENTRY_STATE_BUCKET, visit)
        return result

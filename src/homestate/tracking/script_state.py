"""Run-once and run-on-change bookkeeping for scripts.

Run-once scripts are keyed by the hash of their contents, so renaming a
script does not run it again but editing it does. Run-on-change scripts are
keyed by name and run whenever the recorded hash differs.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..persistent_state import PersistentState
from .records import (
    SCRIPT_ONCHANGE_STATE_BUCKET,
    SCRIPT_STATE_BUCKET,
    ScriptState,
    sha256_hex,
)

logger = logging.getLogger(__name__)


class RunCondition(str, Enum):
    """When a script should run."""
    ALWAYS = "always"
    ONCE = "once"
    ONCHANGE = "onchange"


class ScriptRunTracker:
    """Decides whether scripts need to run and records their runs."""

    def __init__(self, state: PersistentState):
        self.state = state

    def _location(self, name: str, contents: bytes, condition: RunCondition) -> tuple[bytes, bytes]:
        if condition == RunCondition.ONCE:
            return SCRIPT_STATE_BUCKET, sha256_hex(contents).encode()
        return SCRIPT_ONCHANGE_STATE_BUCKET, name.encode()

    def last_run(self, name: str, contents: bytes, condition: RunCondition) -> Optional[ScriptState]:
        """Get the recorded run for a script, None if it never ran."""
        if condition == RunCondition.ALWAYS:
            return None
        bucket, key = self._location(name, contents, condition)
        data = self.state.get(bucket, key)
        if not data:
            return None
        return ScriptState.from_json(data)

    def should_run(self, name: str, contents: bytes, condition: RunCondition) -> bool:
        """Check whether a script needs to run now."""
        condition = RunCondition(condition)
        if condition == RunCondition.ALWAYS:
            return True

        previous = self.last_run(name, contents, condition)
        if previous is None:
            return True
        if condition == RunCondition.ONCHANGE:
            return previous.contents_sha256 != sha256_hex(contents)
        return False

    def record_run(self, name: str, contents: bytes, condition: RunCondition) -> Optional[ScriptState]:
        """
        Record that a script ran.

        Returns:
            The stored ScriptState, or None for scripts that always run
        """
        condition = RunCondition(condition)
        if condition == RunCondition.ALWAYS:
            return None

        record = ScriptState(
            name=name,
            contents_sha256=sha256_hex(contents),
            run_at=datetime.now(timezone.utc).isoformat(),
        )
        bucket, key = self._location(name, contents, condition)
        self.state.set(bucket, key, record.to_json())
        logger.info(f"Recorded {condition.value} run of {name}")
        return record

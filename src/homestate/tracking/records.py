"""Records stored in persistent state by the entry and script trackers."""
import hashlib
import json
from dataclasses import dataclass, asdict
from typing import Optional

ENTRY_STATE_BUCKET = b"entryState"
SCRIPT_STATE_BUCKET = b"scriptState"
SCRIPT_ONCHANGE_STATE_BUCKET = b"scriptOnChangeState"


class StateRecordError(Exception):
    """Raised when a stored record cannot be decoded."""
    pass


def sha256_hex(contents: bytes) -> str:
    """Hex SHA-256 digest of contents."""
    return hashlib.sha256(contents).hexdigest()


@dataclass
class EntryState:
    """Applied state of one destination entry."""
    type: str  # file, dir, symlink, remove
    contents_sha256: str = ""
    mode: Optional[int] = None
    updated_at: Optional[str] = None

    def to_json(self) -> bytes:
        return json.dumps(asdict(self), sort_keys=True).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "EntryState":
        try:
            return cls(**json.loads(data))
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise StateRecordError(f"Invalid entry state record: {e}") from e


@dataclass
class ScriptState:
    """Last run of a script."""
    name: str
    contents_sha256: str
    run_at: str

    def to_json(self) -> bytes:
        return json.dumps(asdict(self), sort_keys=True).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "ScriptState":
        try:
            return cls(**json.loads(data))
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise StateRecordError(f"Invalid script state record: {e}") from e

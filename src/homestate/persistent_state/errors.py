"""Exceptions raised by persistent state implementations."""
from typing import Optional


class PersistentStateError(Exception):
    """Base exception for persistent state failures."""
    pass


class StateIOError(PersistentStateError):
    """Raised when the backing store cannot be read or written."""
    pass


class StateNotOpenError(PersistentStateError):
    """Raised when a store is used before open_or_create()."""
    pass


class StatePermissionError(PersistentStateError, PermissionError):
    """Raised when a write is attempted through a read-only store."""

    def __init__(self, operation: str, bucket: bytes, key: Optional[bytes] = None):
        self.operation = operation
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"{operation} not permitted on read-only persistent state "
            f"(bucket={bucket!r}, key={key!r})"
        )

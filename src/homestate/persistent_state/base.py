"""Persistent state protocol.

Every implementation (the SQLite store, the null store and the dry-run,
read-only and debug wrappers) satisfies this protocol structurally. None of
them inherit from it.
"""
from typing import Callable, Protocol, runtime_checkable

# Called once per entry as visit(key, value). Raising stops the traversal.
Visitor = Callable[[bytes, bytes], None]


@runtime_checkable
class PersistentState(Protocol):
    """Bucketed key-value store for recorded state."""

    def get(self, bucket: bytes, key: bytes) -> bytes:
        """Return the value for key, or b"" if it is absent."""
        ...

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        """Insert or replace the value for key."""
        ...

    def delete(self, bucket: bytes, key: bytes) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        """Call visit(key, value) for each entry in bucket."""
        ...

    def open_or_create(self) -> None:
        """Open the backing store, creating it if needed. Idempotent."""
        ...

"""Read-only wrapper for persistent state."""
from .base import PersistentState, Visitor
from .errors import StatePermissionError


class ReadOnlyPersistentState:
    """Wraps a store, allowing reads and rejecting every write.

    set() and delete() raise StatePermissionError without reaching the
    wrapped store.
    """

    def __init__(self, wrapped: PersistentState):
        self._wrapped = wrapped

    def get(self, bucket: bytes, key: bytes) -> bytes:
        return self._wrapped.get(bucket, key)

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        raise StatePermissionError("Set", bucket, key)

    def delete(self, bucket: bytes, key: bytes) -> None:
        raise StatePermissionError("Delete", bucket, key)

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        self._wrapped.for_each(bucket, visit)

    def open_or_create(self) -> None:
        self._wrapped.open_or_create()

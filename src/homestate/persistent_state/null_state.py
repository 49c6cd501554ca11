"""Persistent state that stores nothing."""
from .base import Visitor


class NullPersistentState:
    """An always-empty store that silently discards every write.

    Used where a store is required but nothing should be recorded.
    """

    def get(self, bucket: bytes, key: bytes) -> bytes:
        return b""

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        pass

    def delete(self, bucket: bytes, key: bytes) -> None:
        pass

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        pass

    def open_or_create(self) -> None:
        pass

"""Dry-run wrapper for persistent state."""
from typing import Optional

from .base import PersistentState, Visitor


class DryRunPersistentState:
    """
    Wraps a store, dropping all writes but recording that they happened.

    Reads go to the wrapped store, so a dry run sees the state recorded by
    earlier real runs. set() and delete() never reach the wrapped store;
    they only set the modified flag. open_or_create() also sets the flag and
    is forwarded, because later reads need an open store.

    By default dropped writes are not remembered: a get() after a set() in
    the same session returns the value from the wrapped store, not the value
    that would have been written. With read_your_writes=True the wrapper
    keeps an in-memory overlay of shadow values and tombstones, consulted by
    get() and merged into for_each(). Either way the wrapped store is never
    modified.

    Usage:
        store = SqlitePersistentState(path)
        dry_run = DryRunPersistentState(store)
        dry_run.open_or_create()
        dry_run.set(b"entryState", b"/home/user/.bashrc", b"...")
        if dry_run.modified:
            print("would modify persistent state")
    """

    def __init__(self, wrapped: PersistentState, read_your_writes: bool = False):
        """
        Args:
            wrapped: The store to protect from writes
            read_your_writes: Shadow dropped writes for later reads
        """
        self._wrapped = wrapped
        self.read_your_writes = read_your_writes
        self.modified = False
        # (bucket, key) -> shadow value, or None for a deleted key
        self._overlay: dict[tuple[bytes, bytes], Optional[bytes]] = {}

    def get(self, bucket: bytes, key: bytes) -> bytes:
        if (bucket, key) in self._overlay:
            value = self._overlay[(bucket, key)]
            return value if value is not None else b""
        return self._wrapped.get(bucket, key)

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        self.modified = True
        if self.read_your_writes:
            self._overlay[(bucket, key)] = value

    def delete(self, bucket: bytes, key: bytes) -> None:
        self.modified = True
        if self.read_your_writes:
            self._overlay[(bucket, key)] = None

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        shadowed = {k: v for (b, k), v in self._overlay.items() if b == bucket}
        if not shadowed:
            self._wrapped.for_each(bucket, visit)
            return

        entries: dict[bytes, bytes] = {}

        def collect(key: bytes, value: bytes) -> None:
            entries[key] = value

        self._wrapped.for_each(bucket, collect)
        for key, value in shadowed.items():
            if value is None:
                entries.pop(key, None)
            else:
                entries[key] = value

        for key in sorted(entries):
            visit(key, entries[key])

    def open_or_create(self) -> None:
        # Counted as a write even when the store already exists
        self.modified = True
        self._wrapped.open_or_create()

"""SQLite-backed persistent state.

All buckets live in one table of a single database file:

    persistent_state(bucket BLOB, key BLOB, value BLOB,
                     PRIMARY KEY (bucket, key))

Each set() and delete() commits its own transaction. for_each() reads the
whole bucket before visiting, so the visitor sees the bucket as it was when
the call started and may write to the store without disturbing the
traversal. Entries are visited in ascending byte order of their keys.
"""
import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from .base import Visitor
from .errors import StateIOError, StateNotOpenError

logger = logging.getLogger(__name__)

# Seconds to wait on a locked database before giving up
DEFAULT_BUSY_TIMEOUT = 5.0

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS persistent_state (
        bucket BLOB NOT NULL,
        key BLOB NOT NULL,
        value BLOB NOT NULL,
        PRIMARY KEY (bucket, key)
    )
"""


def _check_bytes(name: str, data: bytes) -> None:
    if not isinstance(data, bytes):
        raise TypeError(f"{name} must be bytes, not {type(data).__name__}")


def _check_key(key: bytes) -> None:
    _check_bytes("key", key)
    if not key:
        raise ValueError("key required")


class SqlitePersistentState:
    """Persistent state stored in a single SQLite database file."""

    def __init__(
        self,
        path: Union[str, Path],
        timeout: float = DEFAULT_BUSY_TIMEOUT,
    ):
        """
        Initialize the store. Nothing is touched on disk until
        open_or_create() is called.

        Args:
            path: Database file location
            timeout: Seconds to wait when the database is locked
        """
        self.path = Path(path)
        self.timeout = timeout
        self._db: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._db is not None

    def open_or_create(self) -> None:
        """Create the database file and table if absent, then open it."""
        if self._db is not None:
            return

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            db = sqlite3.connect(str(self.path), timeout=self.timeout)
        except (OSError, sqlite3.Error) as e:
            raise StateIOError(f"Cannot open persistent state {self.path}: {e}") from e

        try:
            with db:
                db.execute(_CREATE_TABLE)
        except sqlite3.Error as e:
            db.close()
            raise StateIOError(f"Cannot initialize persistent state {self.path}: {e}") from e

        self._db = db
        logger.debug(f"Opened persistent state at {self.path}")

    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise StateNotOpenError(f"Persistent state {self.path} is not open")
        return self._db

    def get(self, bucket: bytes, key: bytes) -> bytes:
        """Return the stored value, or b"" if the key is absent."""
        _check_bytes("bucket", bucket)
        _check_key(key)
        db = self._conn()
        try:
            row = db.execute(
                "SELECT value FROM persistent_state WHERE bucket = ? AND key = ?",
                (bucket, key),
            ).fetchone()
        except sqlite3.Error as e:
            raise StateIOError(f"Get failed on {self.path}: {e}") from e

        if row is None:
            return b""
        return bytes(row[0])

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        _check_bytes("bucket", bucket)
        _check_key(key)
        _check_bytes("value", value)
        db = self._conn()
        try:
            with db:
                db.execute(
                    "INSERT OR REPLACE INTO persistent_state (bucket, key, value) "
                    "VALUES (?, ?, ?)",
                    (bucket, key, value),
                )
        except sqlite3.Error as e:
            raise StateIOError(f"Set failed on {self.path}: {e}") from e

    def delete(self, bucket: bytes, key: bytes) -> None:
        _check_bytes("bucket", bucket)
        _check_key(key)
        db = self._conn()
        try:
            with db:
                db.execute(
                    "DELETE FROM persistent_state WHERE bucket = ? AND key = ?",
                    (bucket, key),
                )
        except sqlite3.Error as e:
            raise StateIOError(f"Delete failed on {self.path}: {e}") from e

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        """Visit every entry in bucket in ascending key order.

        An exception raised by visit stops the traversal and propagates.
        """
        _check_bytes("bucket", bucket)
        db = self._conn()
        try:
            rows = db.execute(
                "SELECT key, value FROM persistent_state WHERE bucket = ? ORDER BY key",
                (bucket,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StateIOError(f"ForEach failed on {self.path}: {e}") from e

        for key, value in rows:
            visit(bytes(key), bytes(value))

    def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            self._db.close()
            self._db = None

    def __enter__(self):
        self.open_or_create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

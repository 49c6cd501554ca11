"""Debug wrapper that logs every persistent state call.

Each call produces exactly one record, written after the wrapped call has
returned or raised:

    Get('entryState', '/home/user/.bashrc') succeeded
    Set('entryState', '/home/user/.bashrc', '{...}') failed: disk I/O error

Bytes are shown like Python bytes literals without the b prefix, so
non-printable bytes appear escaped. The for_each visitor is shown as _.
"""
import logging
from typing import Any, Callable, TypeVar

from .base import PersistentState, Visitor

T = TypeVar("T")


def _quote(data: Any) -> str:
    if isinstance(data, bytes):
        return repr(data)[1:]
    return repr(data)


class DebugPersistentState:
    """Wraps a store and logs each call and its outcome to a logger.

    The logger is supplied by the caller; nothing is written to a global
    logger. Results and exceptions pass through unchanged.
    """

    def __init__(
        self,
        wrapped: PersistentState,
        logger: logging.Logger,
        level: int = logging.DEBUG,
    ):
        self._wrapped = wrapped
        self._logger = logger
        self._level = level

    def _call(self, call: str, func: Callable[[], T]) -> T:
        try:
            result = func()
        except BaseException as e:
            self._logger.log(self._level, f"{call} failed: {e}")
            raise
        self._logger.log(self._level, f"{call} succeeded")
        return result

    def get(self, bucket: bytes, key: bytes) -> bytes:
        return self._call(
            f"Get({_quote(bucket)}, {_quote(key)})",
            lambda: self._wrapped.get(bucket, key),
        )

    def set(self, bucket: bytes, key: bytes, value: bytes) -> None:
        self._call(
            f"Set({_quote(bucket)}, {_quote(key)}, {_quote(value)})",
            lambda: self._wrapped.set(bucket, key, value),
        )

    def delete(self, bucket: bytes, key: bytes) -> None:
        self._call(
            f"Delete({_quote(bucket)}, {_quote(key)})",
            lambda: self._wrapped.delete(bucket, key),
        )

    def for_each(self, bucket: bytes, visit: Visitor) -> None:
        self._call(
            f"ForEach({_quote(bucket)}, _)",
            lambda: self._wrapped.for_each(bucket, visit),
        )

    def open_or_create(self) -> None:
        self._call("OpenOrCreate()", self._wrapped.open_or_create)

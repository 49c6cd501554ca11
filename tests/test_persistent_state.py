"""Tests for the SQLite and null persistent state stores."""
import sqlite3

import pytest

from homestate.persistent_state import (
    NullPersistentState,
    PersistentState,
    SqlitePersistentState,
    StateIOError,
    StateNotOpenError,
)

BUCKET = b"entryState"


def read_bucket(state, bucket=BUCKET):
    entries = []
    state.for_each(bucket, lambda k, v: entries.append((k, v)))
    return entries


class TestSqlitePersistentState:
    """Tests for SqlitePersistentState."""

    @pytest.fixture
    def store(self, tmp_path):
        """An open store in a temporary directory."""
        s = SqlitePersistentState(tmp_path / "state.sqlite3")
        s.open_or_create()
        yield s
        s.close()

    def test_satisfies_protocol(self, tmp_path):
        """The store satisfies the PersistentState protocol."""
        assert isinstance(SqlitePersistentState(tmp_path / "s.db"), PersistentState)

    def test_open_creates_file_and_parents(self, tmp_path):
        """open_or_create creates missing parent directories and the file."""
        path = tmp_path / "nested" / "dir" / "state.sqlite3"
        s = SqlitePersistentState(path)

        assert not path.exists()
        s.open_or_create()

        assert path.exists()
        assert s.is_open
        s.close()

    def test_nothing_created_before_open(self, tmp_path):
        """Constructing a store does not touch the disk."""
        path = tmp_path / "state.sqlite3"
        SqlitePersistentState(path)
        assert not path.exists()

    def test_open_or_create_idempotent(self, store):
        """Repeated open_or_create keeps the data and does not fail."""
        store.set(BUCKET, b"k", b"v")
        store.open_or_create()
        store.open_or_create()
        assert store.get(BUCKET, b"k") == b"v"

    def test_set_then_get(self, store):
        """A stored value is returned by get."""
        store.set(BUCKET, b"/home/user/.bashrc", b'{"hash":"abc123"}')
        assert store.get(BUCKET, b"/home/user/.bashrc") == b'{"hash":"abc123"}'

    def test_binary_values(self, store):
        """Arbitrary bytes survive a round trip."""
        value = bytes(range(256))
        store.set(b"\x00bin", b"\xff\xfe", value)
        assert store.get(b"\x00bin", b"\xff\xfe") == value

    def test_get_absent_returns_empty(self, store):
        """get of a key that was never set returns b''."""
        assert store.get(BUCKET, b"missing") == b""
        assert store.get(b"no-such-bucket", b"missing") == b""

    def test_set_replaces(self, store):
        """A second set to the same key replaces the value."""
        store.set(BUCKET, b"k", b"first")
        store.set(BUCKET, b"k", b"second")

        assert store.get(BUCKET, b"k") == b"second"
        assert read_bucket(store) == [(b"k", b"second")]

    def test_buckets_are_separate(self, store):
        """The same key in two buckets holds two values."""
        store.set(b"a", b"k", b"1")
        store.set(b"b", b"k", b"2")

        assert store.get(b"a", b"k") == b"1"
        assert store.get(b"b", b"k") == b"2"

    def test_delete(self, store):
        """delete removes a key."""
        store.set(BUCKET, b"k", b"v")
        store.delete(BUCKET, b"k")
        assert store.get(BUCKET, b"k") == b""

    def test_delete_absent(self, store):
        """Deleting a key that does not exist is not an error."""
        store.delete(BUCKET, b"never-set")
        assert store.get(BUCKET, b"never-set") == b""

    def test_for_each_sorted_by_key(self, store):
        """for_each visits entries in ascending key order."""
        store.set(BUCKET, b"c", b"3")
        store.set(BUCKET, b"a", b"1")
        store.set(BUCKET, b"b", b"2")
        store.set(b"other", b"x", b"0")

        assert read_bucket(store) == [(b"a", b"1"), (b"b", b"2"), (b"c", b"3")]

    def test_for_each_empty_bucket(self, store):
        """for_each on an empty bucket never calls the visitor."""
        assert read_bucket(store, b"empty") == []

    def test_for_each_stops_on_visitor_error(self, store):
        """The first exception raised by the visitor stops the traversal."""
        for key in (b"a", b"b", b"c"):
            store.set(BUCKET, key, b"v")

        seen = []

        def visit(key, value):
            seen.append(key)
            if key == b"b":
                raise RuntimeError("stop here")

        with pytest.raises(RuntimeError, match="stop here"):
            store.for_each(BUCKET, visit)

        assert seen == [b"a", b"b"]

    def test_for_each_tolerates_writes_from_visitor(self, store):
        """Deleting entries from inside the visitor still visits every entry."""
        for key in (b"a", b"b", b"c"):
            store.set(BUCKET, key, b"v")

        seen = []

        def visit(key, value):
            seen.append(key)
            store.delete(BUCKET, key)

        store.for_each(BUCKET, visit)

        assert seen == [b"a", b"b", b"c"]
        assert read_bucket(store) == []

    def test_persists_across_instances(self, tmp_path):
        """Values written by one instance are read by the next."""
        path = tmp_path / "state.sqlite3"
        with SqlitePersistentState(path) as first:
            first.set(BUCKET, b"k", b"v")

        with SqlitePersistentState(path) as second:
            assert second.get(BUCKET, b"k") == b"v"

    def test_use_before_open(self, tmp_path):
        """Using a store before open_or_create raises StateNotOpenError."""
        s = SqlitePersistentState(tmp_path / "state.sqlite3")
        with pytest.raises(StateNotOpenError):
            s.get(BUCKET, b"k")
        with pytest.raises(StateNotOpenError):
            s.set(BUCKET, b"k", b"v")

    def test_empty_key_rejected(self, store):
        """An empty key is a programming error."""
        with pytest.raises(ValueError, match="key required"):
            store.set(BUCKET, b"", b"v")

    def test_str_arguments_rejected(self, store):
        """Buckets, keys and values must be bytes."""
        with pytest.raises(TypeError):
            store.set("entryState", b"k", b"v")
        with pytest.raises(TypeError):
            store.get(BUCKET, "k")
        with pytest.raises(TypeError):
            store.set(BUCKET, b"k", "v")

    def test_open_fails_on_unusable_path(self, tmp_path):
        """A path that cannot hold a database raises StateIOError."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        s = SqlitePersistentState(blocker / "state.sqlite3")

        with pytest.raises(StateIOError):
            s.open_or_create()
        assert not s.is_open

    def test_open_fails_on_corrupt_file(self, tmp_path):
        """A file that is not a SQLite database raises StateIOError."""
        path = tmp_path / "state.sqlite3"
        path.write_bytes(b"this is not a sqlite database" * 100)
        s = SqlitePersistentState(path)

        with pytest.raises(StateIOError) as exc:
            s.open_or_create()
        assert isinstance(exc.value.__cause__, sqlite3.Error)

    def test_close_is_idempotent(self, store):
        """close can be called twice."""
        store.close()
        store.close()
        assert not store.is_open


class TestNullPersistentState:
    """Tests for NullPersistentState."""

    def test_satisfies_protocol(self):
        """The null store satisfies the PersistentState protocol."""
        assert isinstance(NullPersistentState(), PersistentState)

    def test_get_always_empty(self):
        """get returns b'' even after set."""
        s = NullPersistentState()
        s.open_or_create()
        s.set(BUCKET, b"k", b"v")
        assert s.get(BUCKET, b"k") == b""

    def test_for_each_never_visits(self):
        """for_each never calls the visitor."""
        s = NullPersistentState()
        s.set(BUCKET, b"a", b"1")
        s.set(BUCKET, b"b", b"2")

        def visit(key, value):
            raise AssertionError("visitor must not be called")

        s.for_each(BUCKET, visit)

    def test_delete_succeeds(self):
        """delete always succeeds."""
        NullPersistentState().delete(BUCKET, b"k")

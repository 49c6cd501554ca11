"""Tests for composing persistent state per invocation."""
import logging

import pytest

from homestate.persistent_state import (
    DebugPersistentState,
    DryRunPersistentState,
    NullPersistentState,
    ReadOnlyPersistentState,
    SqlitePersistentState,
    StateMode,
    StatePermissionError,
    build_state_stack,
)

BUCKET = b"entryState"


@pytest.fixture
def state_file(tmp_path):
    """A state file holding one recorded entry."""
    path = tmp_path / "state.sqlite3"
    with SqlitePersistentState(path) as s:
        s.set(BUCKET, b"/home/user/.bashrc", b"recorded")
    return path


class TestBuildStateStack:
    """Tests for build_state_stack."""

    def test_normal_mode(self, state_file):
        """Normal mode hands out the SQLite store itself."""
        stack = build_state_stack(state_file)

        assert isinstance(stack.state, SqlitePersistentState)
        assert stack.backing is stack.state
        assert stack.dry_run is None

        with stack as state:
            state.set(BUCKET, b"k", b"v")
            assert state.get(BUCKET, b"k") == b"v"
        assert stack.modified is False

    def test_dry_run_mode(self, state_file):
        """Dry-run mode wraps the store and reports modification."""
        stack = build_state_stack(state_file, mode=StateMode.DRY_RUN)

        assert isinstance(stack.state, DryRunPersistentState)
        with stack as state:
            state.set(BUCKET, b"/home/user/.bashrc", b"changed")

        assert stack.modified is True
        with SqlitePersistentState(state_file) as direct:
            assert direct.get(BUCKET, b"/home/user/.bashrc") == b"recorded"

    def test_dry_run_read_your_writes(self, state_file):
        """read_your_writes is passed to the dry-run layer."""
        stack = build_state_stack(state_file, mode="dry_run", read_your_writes=True)

        with stack as state:
            state.set(BUCKET, b"/home/user/.bashrc", b"changed")
            assert state.get(BUCKET, b"/home/user/.bashrc") == b"changed"

    def test_read_only_mode(self, state_file):
        """Read-only mode reads recorded state and rejects writes."""
        stack = build_state_stack(state_file, mode=StateMode.READ_ONLY)

        assert isinstance(stack.state, ReadOnlyPersistentState)
        with stack as state:
            assert state.get(BUCKET, b"/home/user/.bashrc") == b"recorded"
            with pytest.raises(StatePermissionError):
                state.set(BUCKET, b"k", b"v")
        assert stack.modified is False

    def test_null_mode_needs_no_file(self, tmp_path):
        """Null mode never touches the disk."""
        stack = build_state_stack(None, mode=StateMode.NULL)

        assert isinstance(stack.state, NullPersistentState)
        assert stack.backing is None
        with stack as state:
            state.set(BUCKET, b"k", b"v")
            assert state.get(BUCKET, b"k") == b""
        assert list(tmp_path.iterdir()) == []

    def test_file_required_outside_null_mode(self):
        """A state file is required unless the mode is NULL."""
        with pytest.raises(ValueError):
            build_state_stack(None, mode=StateMode.NORMAL)

    def test_unknown_mode(self, state_file):
        """Unknown modes are rejected."""
        with pytest.raises(ValueError):
            build_state_stack(state_file, mode="sometimes")

    def test_debug_is_outermost(self, state_file, caplog):
        """A debug logger adds the debug layer around the dry-run layer."""
        caplog.set_level(logging.DEBUG, logger="tests.stack")
        stack = build_state_stack(
            state_file,
            mode=StateMode.DRY_RUN,
            debug_logger=logging.getLogger("tests.stack"),
        )

        assert isinstance(stack.state, DebugPersistentState)
        assert isinstance(stack.dry_run, DryRunPersistentState)

        with stack as state:
            state.set(BUCKET, b"k", b"v")

        assert stack.modified is True
        messages = [r.getMessage() for r in caplog.records if r.name == "tests.stack"]
        assert messages == [
            "OpenOrCreate() succeeded",
            "Set('entryState', 'k', 'v') succeeded",
        ]

    def test_close_releases_backing_store(self, state_file):
        """Leaving the context closes the SQLite connection."""
        stack = build_state_stack(state_file)
        with stack:
            assert stack.backing.is_open
        assert not stack.backing.is_open

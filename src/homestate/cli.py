#!/usr/bin/env python3
"""Inspect and maintain the homestate persistent state file.

Usage:
    homestate-state [--config PATH] [--state-file PATH] [-n | --read-only] [-v] COMMAND

Commands:
    dump [--bucket B]...     Print buckets as YAML
    get BUCKET KEY           Print one value
    set BUCKET KEY VALUE     Store one value
    delete BUCKET KEY        Remove one value
    reset BUCKET             Remove every value in a bucket
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import ConfigError, load_config
from .persistent_state import (
    PersistentState,
    PersistentStateError,
    StateMode,
    StatePermissionError,
    build_state_stack,
)
from .tracking import ENTRY_STATE_BUCKET, SCRIPT_ONCHANGE_STATE_BUCKET, SCRIPT_STATE_BUCKET
from .utils.logging_config import setup_logging, state_logger

logger = logging.getLogger("homestate.cli")

DEFAULT_DUMP_BUCKETS = [ENTRY_STATE_BUCKET, SCRIPT_STATE_BUCKET, SCRIPT_ONCHANGE_STATE_BUCKET]


def _decode_value(value: bytes) -> Any:
    """JSON values are shown decoded, anything else as text."""
    try:
        return json.loads(value)
    except ValueError:
        return value.decode("utf-8", "backslashreplace")


def _read_bucket(state: PersistentState, bucket: bytes) -> dict[str, Any]:
    entries: dict[str, Any] = {}

    def visit(key: bytes, value: bytes) -> None:
        entries[key.decode("utf-8", "backslashreplace")] = _decode_value(value)

    state.for_each(bucket, visit)
    return entries


def cmd_dump(state: PersistentState, args: argparse.Namespace) -> None:
    buckets = [b.encode() for b in args.bucket] if args.bucket else DEFAULT_DUMP_BUCKETS
    data = {bucket.decode(): _read_bucket(state, bucket) for bucket in buckets}
    print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")


def cmd_get(state: PersistentState, args: argparse.Namespace) -> None:
    value = state.get(args.bucket.encode(), args.key.encode())
    print(value.decode("utf-8", "backslashreplace"))


def cmd_set(state: PersistentState, args: argparse.Namespace) -> None:
    state.set(args.bucket.encode(), args.key.encode(), args.value.encode())


def cmd_delete(state: PersistentState, args: argparse.Namespace) -> None:
    state.delete(args.bucket.encode(), args.key.encode())


def cmd_reset(state: PersistentState, args: argparse.Namespace) -> None:
    bucket = args.bucket.encode()
    keys: list[bytes] = []
    state.for_each(bucket, lambda key, value: keys.append(key))
    for key in keys:
        state.delete(bucket, key)
    logger.info(f"Removed {len(keys)} entries from {args.bucket}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="homestate-state",
        description="Inspect and maintain homestate persistent state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show recorded entry and script state
    homestate-state dump

    # See whether a reset would change anything, without writing
    homestate-state --dry-run reset entryState

Environment:
    HOMESTATE_STATE_FILE    State database (default: ~/.config/homestate/homestate-state.sqlite3)
    HOMESTATE_LOG_LEVEL     Console log level
""",
    )
    parser.add_argument("--config", type=Path, help="Config file (default: search)")
    parser.add_argument("--state-file", type=Path, help="State database to use")

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Do not write to the state file",
    )
    modes.add_argument(
        "--read-only",
        action="store_true",
        help="Reject any write to the state file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every persistent state call",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    dump = sub.add_parser("dump", help="Print buckets as YAML")
    dump.add_argument("--bucket", action="append", help="Bucket to dump (repeatable)")
    dump.set_defaults(func=cmd_dump)

    get = sub.add_parser("get", help="Print one value")
    get.add_argument("bucket")
    get.add_argument("key")
    get.set_defaults(func=cmd_get)

    set_ = sub.add_parser("set", help="Store one value")
    set_.add_argument("bucket")
    set_.add_argument("key")
    set_.add_argument("value")
    set_.set_defaults(func=cmd_set)

    delete = sub.add_parser("delete", help="Remove one value")
    delete.add_argument("bucket")
    delete.add_argument("key")
    delete.set_defaults(func=cmd_delete)

    reset = sub.add_parser("reset", help="Remove every value in a bucket")
    reset.add_argument("bucket")
    reset.set_defaults(func=cmd_reset)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for homestate-state."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"homestate-state: {e}", file=sys.stderr)
        return 1

    if args.state_file:
        config.state_file = args.state_file

    setup_logging(level="DEBUG" if args.verbose else config.log_level, log_file=config.log_file)

    if args.dry_run:
        mode = StateMode.DRY_RUN
    elif args.read_only:
        mode = StateMode.READ_ONLY
    else:
        mode = StateMode.NORMAL

    stack = build_state_stack(
        config.state_file,
        mode=mode,
        debug_logger=state_logger if args.verbose else None,
        read_your_writes=config.read_your_writes,
    )

    try:
        with stack as state:
            args.func(state, args)
    except StatePermissionError as e:
        logger.error(f"{e.operation} not permitted in read-only mode")
        return 1
    except PersistentStateError as e:
        logger.error(f"Persistent state error: {e}")
        return 1
    except (ValueError, TypeError) as e:
        logger.error(f"Invalid argument: {e}")
        return 1

    if stack.modified:
        logger.info("Dry run: would modify persistent state")

    return 0


if __name__ == "__main__":
    sys.exit(main())

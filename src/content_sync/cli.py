"""Command-line entry point: ``content-sync``."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from . import __version__
from .config_loader import ensure_config
from .lifespan import sync_lifespan
from .sync import (
    SyncContext,
    format_cache_status,
    format_debug_info,
    format_sync_result,
    result_to_json,
)


def _emit(as_json: bool, data: dict, text: str) -> None:
    if as_json:
        print(json.dumps(data, indent=2, default=str))
    else:
        print(text)


async def _sync(ctx: SyncContext, args: argparse.Namespace) -> int:
    if args.refresh == "hard":
        result = await ctx.refresh(hard=True)
    elif args.refresh == "soft":
        result = await ctx.refresh()
    else:
        result = await ctx.load()
    _emit(args.json, result_to_json(result), format_sync_result(result))
    return 0 if result.ok else 1


async def _status(ctx: SyncContext, args: argparse.Namespace) -> int:
    status = await ctx.cache.status()
    info = await ctx.timestamp_info()
    _emit(
        args.json,
        status.model_dump(mode="json"),
        format_cache_status(status, info),
    )
    return 0


async def _debug(ctx: SyncContext, args: argparse.Namespace) -> int:
    # A fresh process holds nothing in memory until one cycle has run.
    result = await ctx.load()
    info = ctx.debug_info()
    _emit(args.json, info.model_dump(mode="json"), format_debug_info(info))
    return 0 if result.ok else 1


async def _clear(ctx: SyncContext, args: argparse.Namespace) -> int:
    await ctx.reset()
    _emit(args.json, {"cleared": True}, "Cache cleared.")
    return 0


_COMMANDS = {
    "sync": _sync,
    "status": _status,
    "debug": _debug,
    "clear": _clear,
}


async def main(args: argparse.Namespace, config_overrides: dict | None) -> int:
    """Run one sub-command inside a managed ``SyncContext``."""
    async with sync_lifespan(config_overrides) as ctx:
        return await _COMMANDS[args.command](ctx, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-sync",
        description="content-sync - keep a local copy of a remote content document current",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run one sync cycle (config from .env or .content_sync/config.yml)
  content-sync sync

  # Override the source URL and use the flat-file store
  content-sync --url https://example.org/app-config.ini --storage files sync

  # Forget the durable cache and reload everything from the remote
  content-sync sync --refresh hard

  # Show what the durable cache holds, as JSON
  content-sync --json status

  # Write a starter config file
  content-sync init

Exit status is 1 when a cycle ends with no content served.
        """,
    )

    parser.add_argument(
        "--url",
        help="Override source URL (takes precedence over CONTENT_SYNC_URL env var and config files)",
    )
    parser.add_argument(
        "--storage",
        choices=["sqlite", "files"],
        help="Durable store backend (default: sqlite)",
    )
    parser.add_argument(
        "--cache-dir",
        help="Directory holding the durable store",
    )
    parser.add_argument(
        "--namespace",
        help="Prefix for persisted record names",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds allowed per transport attempt (default: 20)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print command output as JSON",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"content-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sync_parser = sub.add_parser("sync", help="Run one sync cycle")
    sync_parser.add_argument(
        "--refresh",
        choices=["soft", "hard"],
        help="soft: clear memory first; hard: also wipe the durable cache",
    )
    sub.add_parser("status", help="Show the durable cache status")
    sub.add_parser("debug", help="Run a cycle and show in-memory state")
    sub.add_parser("clear", help="Wipe the durable cache")
    init_parser = sub.add_parser("init", help="Write a starter config file")
    init_parser.add_argument(
        "--path",
        help="Target file (default: .content_sync/config.yml)",
    )

    return parser


def _overrides_from_args(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.url:
        overrides["url"] = args.url
    if args.storage:
        overrides["storage"] = args.storage
    if args.cache_dir:
        overrides["cache_dir"] = args.cache_dir
    if args.namespace:
        overrides["namespace"] = args.namespace
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.debug:
        overrides["debug"] = True
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.log_format:
        overrides["log_format"] = args.log_format
    return overrides


def run(argv: list[str] | None = None) -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        path = ensure_config(Path(args.path) if args.path else None)
        print(f"Config file: {path}")
        sys.exit(0)

    config_overrides = _overrides_from_args(args)

    try:
        code = asyncio.run(main(args, config_overrides or None))
    except RuntimeError:
        # Error already printed to stderr by lifespan manager
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)
    sys.exit(code)


if __name__ == "__main__":
    run()

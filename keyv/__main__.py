"""Interface for ``python -m keyv``."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from argparse import ArgumentParser
from typing import TYPE_CHECKING, Any

from ._version import version
from .config import StoreConfig, create_store
from .errors import KeyvError


if TYPE_CHECKING:
    from argparse import Namespace
    from collections.abc import Sequence


__all__ = ["main"]

_MISSING = object()


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="keyv", description="Inspect and edit a keyv store.")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument(
        "--url", default="memory://", help="backend URL, e.g. sqlite:///keyv.db or redis://localhost:6379/0"
    )
    _ = parser.add_argument("--namespace", default="", help="key namespace")
    _ = parser.add_argument("--verbose", action="store_true", help="enable debug logging")

    commands = parser.add_subparsers(dest="command")
    get_parser = commands.add_parser("get", help="print the JSON value stored under a key")
    _ = get_parser.add_argument("key")
    set_parser = commands.add_parser("set", help="store a value (parsed as JSON when possible)")
    _ = set_parser.add_argument("key")
    _ = set_parser.add_argument("value")
    _ = set_parser.add_argument("--ttl", type=float, default=None, help="time to live in seconds")
    delete_parser = commands.add_parser("delete", help="delete a key")
    _ = delete_parser.add_argument("key")
    _ = commands.add_parser("clear", help="delete every key in the namespace")
    return parser


async def run(args: Namespace) -> int:
    config = StoreConfig.from_url(args.url, namespace=args.namespace)
    async with create_store(config) as store:
        if args.command == "get":
            value = await store.get(args.key, default=_MISSING)
            if value is _MISSING:
                return 1
            print(json.dumps(value))
        elif args.command == "set":
            await store.set(args.key, _parse_value(args.value), ttl=args.ttl)
        elif args.command == "delete":
            await store.delete(args.key)
        elif args.command == "clear":
            await store.clear()
    return 0


def main(args: Sequence[str] | None = None) -> int:
    """Argument parser for the CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)
    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG)
    if parsed.command is None:
        parser.print_help()
        return 0
    try:
        return asyncio.run(run(parsed))
    except KeyvError as error:
        print(f"keyv: {error}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

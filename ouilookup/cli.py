from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional

import uvicorn

from ouilookup.config import DEFAULT_REGISTRY_PATH, apply_config, load_config, section_defaults
from ouilookup.engine import resolve
from ouilookup.errors import LoadError
from ouilookup.index import PrefixIndex
from ouilookup.loader import load
from ouilookup.log import setup_logging
from ouilookup.models import InvalidAddressFormat, Resolved
from ouilookup.records import validate_delimiter

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNRESOLVED = 2

EPILOG = """\
exit status of "lookup":
  0  every address resolved
  1  at least one address was not a valid MAC address
  2  all addresses were valid but at least one had no registry match
"""


def _delimiter_arg(value: str) -> str:
    try:
        return validate_delimiter(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _load_index(args: argparse.Namespace) -> PrefixIndex:
    try:
        return load(args.registry, strict=not args.lenient, delimiter=args.delimiter)
    except LoadError as exc:
        raise SystemExit(f"error: {exc}") from exc


def cmd_lookup(args: argparse.Namespace) -> int:
    index = _load_index(args)
    status = EXIT_OK
    for mac in args.mac:
        result = resolve(index, mac)
        prefix = f"{mac}: " if len(args.mac) > 1 else ""
        if isinstance(result, Resolved):
            print(f"{prefix}{result.organization}")
            if args.address and result.registered_address:
                print(f"{' ' * len(prefix)}{result.registered_address}")
        elif isinstance(result, InvalidAddressFormat):
            print(f"{prefix}Invalid MAC Address.")
            status = EXIT_INVALID
        else:
            print(f"{prefix}No match.")
            if status == EXIT_OK:
                status = EXIT_UNRESOLVED
    return status


def cmd_stats(args: argparse.Namespace) -> int:
    stats = _load_index(args).stats()
    print(f"registry {stats.source}")
    for block, count in stats.by_block.items():
        print(f"{block:>6} {count:>8}")
    print(f"{'total':>6} {stats.total:>8}")
    return EXIT_OK


def cmd_web(args: argparse.Namespace) -> int:
    setup_logging(max(args.verbose, 1))
    print(f"[*] Serving OUI lookups on {args.host}:{args.port}")
    uvicorn.run("ouilookup.web.api:app", host=args.host, port=args.port, reload=False)
    return EXIT_OK


def build_parser(config: Optional[Dict[str, Any]] = None) -> argparse.ArgumentParser:
    config = config or {}
    parser = argparse.ArgumentParser(
        prog="ouilookup",
        description="Resolve MAC addresses to the organization that registered them.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--registry",
        default=str(DEFAULT_REGISTRY_PATH),
        help="Registry table (default: %(default)s)",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed registry lines instead of refusing to load",
    )
    parser.add_argument(
        "--delimiter",
        type=_delimiter_arg,
        help="Single-character registry field delimiter (default: auto-detect)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="More logging (-v info, -vv debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Resolve one or more MAC addresses",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    lookup_parser.add_argument("mac", nargs="+", help="MAC address (aa:bb:cc:dd:ee:ff, aa-bb-..., aabb.ccdd.eeff)")
    lookup_parser.add_argument("--address", action="store_true", help="Also print the registered address")
    lookup_parser.set_defaults(func=cmd_lookup)

    stats_parser = subparsers.add_parser("stats", help="Show registry size per block type")
    stats_parser.set_defaults(func=cmd_stats)

    web_parser = subparsers.add_parser("web", help="Serve lookups over HTTP")
    web_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    web_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    web_parser.set_defaults(func=cmd_web, **section_defaults(config, "web", "host", "port"))

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    config = load_config()
    parser = build_parser(config)
    apply_config(parser, config)
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

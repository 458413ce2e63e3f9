"""Command line entry point for inspecting and warming the caches.

    python -m tm_stats_cache.main get corporations
    python -m tm_stats_cache.main status
    python -m tm_stats_cache.main clear awards
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from . import config
from .api import ApiError
from .logger import setup_logging
from .registry import CacheRegistry
from .resource_cache import ResourceCache
from .resources import RESOURCES

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tm-stats-cache", description="Terraforming Mars stats cache"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log cache hits and misses"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="print a cached payload as JSON")
    get.add_argument("resource")
    get.add_argument(
        "--refresh", action="store_true", help="ignore cached data and refetch"
    )

    status = sub.add_parser("status", help="show cache freshness")
    status.add_argument("resource", nargs="?")

    clear = sub.add_parser("clear", help="invalidate cached data")
    clear.add_argument("resource", nargs="?")

    sub.add_parser("list", help="list known resources")
    return parser


def _dump(obj: object) -> None:
    json.dump(obj, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def _lookup(registry: CacheRegistry, name: str) -> ResourceCache | None:
    try:
        return registry.get(name)
    except KeyError as exc:
        sys.stderr.write(f"{exc.args[0]}\n")
        return None


def dispatch(args: argparse.Namespace, registry: CacheRegistry | None = None) -> int:
    """Run an already parsed command; returns the process exit code."""
    registry = registry or CacheRegistry.from_settings(config.settings)

    if args.command == "list":
        for spec in RESOURCES:
            sys.stdout.write(
                f"{spec.name:<20} {spec.key:<22} {spec.path}  {spec.description}\n"
            )
        return 0

    cache = None
    if getattr(args, "resource", None):
        cache = _lookup(registry, args.resource)
        if cache is None:
            return 2

    if args.command == "get":
        try:
            _dump(asyncio.run(cache.get_cached(force_refresh=args.refresh)))
        except ApiError as exc:
            sys.stderr.write(f"Failed to load: {exc}\n")
            return 1
    elif args.command == "status":
        if cache is not None:
            _dump(cache.get_cache_status().as_dict())
        else:
            _dump({k: v.as_dict() for k, v in registry.statuses().items()})
    elif args.command == "clear":
        if cache is not None:
            cache.clear_cache()
        else:
            registry.clear_all()
    return 0


def run(argv: list[str] | None = None, registry: CacheRegistry | None = None) -> int:
    return dispatch(build_parser().parse_args(argv), registry)


def main() -> None:
    args = build_parser().parse_args()
    setup_logging("DEBUG" if args.verbose else None)
    sys.exit(dispatch(args))


if __name__ == "__main__":
    main()

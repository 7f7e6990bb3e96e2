"""Command-line entry point for the Zonerama scraper."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DEBUG_DIR,
    DEFAULT_ENTITY_LIMIT,
    DEFAULT_PHOTO_LIMIT,
    CrawlConfig,
    ServerSettings,
)
from .crawler import crawl_album, crawl_listing
from .errors import InputError
from .fetch import PageFetcher
from .models import CrawlResult
from .utils import validate_source_link

logger = logging.getLogger("zonerama_scraper.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("listing", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("link", help="Zonerama URL to scrape")
    parser.add_argument(
        "--photo-limit",
        type=int,
        default=DEFAULT_PHOTO_LIMIT,
        help="Maximum photos per album (0 = no limit)",
    )
    parser.add_argument(
        "--no-render",
        action="store_true",
        help="Fetch raw HTML instead of rendering pages in headless Chromium",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-fetch navigation timeout in seconds",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Give up waiting for album fetches after this many seconds",
    )
    parser.add_argument(
        "--debug-dir",
        type=Path,
        default=None,
        help=f"Save fetched HTML under this directory (e.g. {DEFAULT_DEBUG_DIR})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape album and photo metadata from Zonerama profiles and albums.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    listing_parser = subparsers.add_parser(
        "listing", help="Crawl a profile link and scrape its newest albums"
    )
    _add_common_arguments(listing_parser)
    listing_parser.add_argument(
        "--entity-limit",
        type=int,
        default=DEFAULT_ENTITY_LIMIT,
        help="Maximum albums to fetch from the profile (0 = no limit)",
    )
    listing_parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help="Album pages fetched in parallel",
    )

    album_parser = subparsers.add_parser("album", help="Scrape a single album link")
    _add_common_arguments(album_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _build_config(args: argparse.Namespace) -> CrawlConfig:
    config = CrawlConfig(
        photo_limit=args.photo_limit,
        rendered=not args.no_render,
        navigation_timeout=args.timeout,
        crawl_deadline=args.deadline,
    )
    if args.command == "listing":
        config.entity_limit = args.entity_limit
        config.concurrency = args.concurrency
    if args.debug_dir is not None:
        config.debug = True
        config.debug_dir = args.debug_dir
    return config


async def _run_crawl(args: argparse.Namespace, config: CrawlConfig) -> CrawlResult:
    crawl = crawl_listing if args.command == "listing" else crawl_album
    async with PageFetcher.from_config(config) as fetcher:
        return await crawl(args.link, config, fetcher)


def _crawl(args: argparse.Namespace) -> int:
    settings = ServerSettings.from_env()
    required_path = "/Album/" if args.command == "album" else None
    try:
        validate_source_link(args.link, settings.allowed_host, required_path=required_path)
    except InputError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    config = _build_config(args)
    result = asyncio.run(_run_crawl(args, config))
    json.dump(result.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    sys.stdout.flush()
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .server import create_app

    settings = ServerSettings.from_env()
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "serve":
        sys.exit(_serve(args))
    sys.exit(_crawl(args))


if __name__ == "__main__":
    main()

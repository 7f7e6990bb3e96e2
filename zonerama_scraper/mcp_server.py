"""MCP server exposing the album and listing crawls as tools."""

from __future__ import annotations

import json
import logging

from mcp.server.fastmcp import FastMCP

from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_ENTITY_LIMIT,
    DEFAULT_PHOTO_LIMIT,
    ServerSettings,
)
from .crawler import crawl_album, crawl_listing
from .fetch import PageFetcher
from .utils import validate_source_link

logger = logging.getLogger("zonerama_scraper.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="zonerama-scraper")


@mcp.tool()
async def album(link: str, photo_limit: int = DEFAULT_PHOTO_LIMIT) -> str:
    """Scrape one Zonerama album and return its metadata and photos as JSON."""
    settings = ServerSettings.from_env()
    link = validate_source_link(link, settings.allowed_host, required_path="/Album/")
    config = settings.crawl_config(photo_limit=photo_limit)
    async with PageFetcher.from_config(config) as fetcher:
        result = await crawl_album(link, config, fetcher)
    return json.dumps(result.to_dict(), ensure_ascii=False)


@mcp.tool()
async def listing(
    link: str,
    entity_limit: int = DEFAULT_ENTITY_LIMIT,
    photo_limit: int = DEFAULT_PHOTO_LIMIT,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> str:
    """Crawl a Zonerama profile and return its newest albums as JSON."""
    settings = ServerSettings.from_env()
    link = validate_source_link(link, settings.allowed_host)
    config = settings.crawl_config(
        entity_limit=entity_limit,
        photo_limit=photo_limit,
        concurrency=concurrency,
    )
    async with PageFetcher.from_config(config) as fetcher:
        result = await crawl_listing(link, config, fetcher)
    return json.dumps(result.to_dict(), ensure_ascii=False)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()

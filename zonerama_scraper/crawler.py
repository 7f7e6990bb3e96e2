"""Crawl orchestration: routing, bounded-concurrency album fan-out and final ordering."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set

from bs4 import BeautifulSoup

from .config import CrawlConfig
from .content import extract_entity, extract_entries
from .debug import save_debug
from .fetch import FetchedPage, PageFetcher
from .merge import merge_preliminary
from .models import Album, CrawlResult, ListingEntry, PreliminaryMetadata
from .ordering import sort_albums, sort_entries
from .router import PageKind, classify

logger = logging.getLogger("zonerama_scraper")


class CrawlStage(Enum):
    START = "start"
    ROUTING = "routing"
    LISTING_FANOUT = "listing_fanout"
    SINGLE_ENTITY = "single_entity"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class CrawlContext:
    """State shared by the tasks of one crawl request.

    ``lock`` guards ``result``, ``visited`` and ``preliminary`` together.
    ``permits`` bounds the album fetches in flight; each dispatched task
    releases its permit exactly once when it finishes, however it finishes.
    """

    input_link: str
    config: CrawlConfig
    fetcher: PageFetcher
    result: CrawlResult
    permits: asyncio.Semaphore
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    visited: Set[str] = field(default_factory=set)
    preliminary: Dict[str, PreliminaryMetadata] = field(default_factory=dict)
    tasks: List[asyncio.Task] = field(default_factory=list)
    stage: CrawlStage = CrawlStage.START
    deadline: Optional[float] = None

    @classmethod
    def create(cls, link: str, config: CrawlConfig, fetcher: PageFetcher) -> "CrawlContext":
        deadline = None
        if config.crawl_deadline is not None:
            deadline = asyncio.get_running_loop().time() + config.crawl_deadline
        return cls(
            input_link=link,
            config=config,
            fetcher=fetcher,
            result=CrawlResult(input_link=link),
            permits=asyncio.Semaphore(config.effective_concurrency()),
            deadline=deadline,
        )

    @property
    def dispatched(self) -> int:
        return len(self.tasks)

    def remaining(self) -> Optional[float]:
        """Seconds left before the outer deadline, or ``None`` without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - asyncio.get_running_loop().time())

    def enter(self, stage: CrawlStage) -> None:
        logger.debug("crawl %s: %s -> %s", self.input_link, self.stage.value, stage.value)
        self.stage = stage

    async def fetch(self, link: str) -> Optional[FetchedPage]:
        return await self.fetcher.fetch(link, rendered=self.config.rendered)

    def dump(self, stage: str, page: Optional[FetchedPage]) -> Optional[Path]:
        if not self.config.debug:
            return None
        return save_debug(stage, page, self.config.debug_dir)

    async def add_album(self, album: Album) -> None:
        async with self.lock:
            preliminary = self.preliminary.get(album.url)
            if preliminary is not None:
                album = merge_preliminary(album, preliminary)
            self.result.entities.append(album)


def _album_from_page(ctx: CrawlContext, page: FetchedPage, soup: Optional[BeautifulSoup] = None) -> Album:
    if soup is None:
        soup = page.document()
    return extract_entity(
        soup,
        page.url,
        photo_limit=ctx.config.photo_limit,
        base_url=page.final_url,
    )


async def _process_album(ctx: CrawlContext, link: str) -> None:
    """Fetch one album page and add it to the result. Never raises."""
    try:
        page = await ctx.fetch(link)
        if page is None:
            return
        ctx.dump("album", page)
        await ctx.add_album(_album_from_page(ctx, page))
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error processing album %s", link)


async def _claim(ctx: CrawlContext, entry: ListingEntry) -> bool:
    """Record the tile's metadata and mark its link visited; False if already visited."""
    async with ctx.lock:
        ctx.preliminary.setdefault(entry.target_link, entry.preliminary)
        if entry.target_link in ctx.visited:
            return False
        ctx.visited.add(entry.target_link)
        return True


async def _unclaim(ctx: CrawlContext, link: str) -> None:
    async with ctx.lock:
        ctx.visited.discard(link)


async def _dispatch(ctx: CrawlContext, link: str) -> bool:
    """Acquire a permit and start the album fetch. False if the deadline expired first."""
    try:
        await asyncio.wait_for(ctx.permits.acquire(), timeout=ctx.remaining())
    except asyncio.TimeoutError:
        return False
    task = asyncio.create_task(_process_album(ctx, link))
    task.add_done_callback(lambda _task: ctx.permits.release())
    ctx.tasks.append(task)
    return True


async def _fan_out(ctx: CrawlContext, soup: BeautifulSoup, page: FetchedPage) -> None:
    ctx.enter(CrawlStage.LISTING_FANOUT)
    ctx.dump("listing", page)
    entries = sort_entries(extract_entries(soup, page.final_url))
    limit = ctx.config.entity_limit
    for entry in entries:
        if limit > 0 and ctx.dispatched >= limit:
            break
        if not await _claim(ctx, entry):
            continue
        if not await _dispatch(ctx, entry.target_link):
            await _unclaim(ctx, entry.target_link)
            logger.warning(
                "crawl %s: deadline expired while dispatching %s",
                ctx.input_link,
                entry.target_link,
            )
            break


async def _drain(ctx: CrawlContext) -> None:
    """Wait for every dispatched album fetch, or until the outer deadline."""
    ctx.enter(CrawlStage.DRAINING)
    if not ctx.tasks:
        return
    _done, pending = await asyncio.wait(ctx.tasks, timeout=ctx.remaining())
    if pending:
        logger.warning(
            "crawl %s: deadline expired with %d album fetch(es) outstanding",
            ctx.input_link,
            len(pending),
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


def _finish(ctx: CrawlContext, started: float) -> CrawlResult:
    ctx.enter(CrawlStage.DONE)
    ctx.result.entities = sort_albums(ctx.result.entities)
    logger.info(
        "crawl %s: %d album(s) from %d dispatched fetch(es) in %.2fs",
        ctx.input_link,
        len(ctx.result.entities),
        ctx.dispatched,
        time.perf_counter() - started,
    )
    return ctx.result


async def crawl_listing(link: str, config: CrawlConfig, fetcher: PageFetcher) -> CrawlResult:
    """Crawl a profile/listing link, following album tiles; an album link is scraped directly."""
    started = time.perf_counter()
    ctx = CrawlContext.create(link, config, fetcher)
    page = await ctx.fetch(link)
    if page is not None:
        ctx.enter(CrawlStage.ROUTING)
        ctx.dump("router", page)
        soup = page.document()
        kind = classify(soup)
        if kind is PageKind.LISTING:
            logger.info("router: classified as LISTING -> %s", page.url)
        elif kind is PageKind.ENTITY:
            logger.info("router: classified as ENTITY -> %s", page.url)
        else:
            logger.info("router: defaulting to LISTING -> %s", page.url)

        if kind.is_listing:
            await _fan_out(ctx, soup, page)
        else:
            ctx.enter(CrawlStage.SINGLE_ENTITY)
            ctx.dump("album", page)
            await ctx.add_album(_album_from_page(ctx, page, soup))
    await _drain(ctx)
    return _finish(ctx, started)


async def crawl_album(link: str, config: CrawlConfig, fetcher: PageFetcher) -> CrawlResult:
    """Scrape a single album page without classification or fan-out."""
    started = time.perf_counter()
    ctx = CrawlContext.create(link, config, fetcher)
    page = await ctx.fetch(link)
    if page is not None:
        ctx.enter(CrawlStage.SINGLE_ENTITY)
        ctx.dump("album", page)
        await ctx.add_album(_album_from_page(ctx, page))
    await _drain(ctx)
    return _finish(ctx, started)

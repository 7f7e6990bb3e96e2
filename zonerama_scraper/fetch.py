"""Page fetching through Playwright (rendered) or requests (plain), with retries."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    Error as PlaywrightError,
    async_playwright,
)
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from .config import CrawlConfig
from .content import parse_document
from .errors import FetchError

logger = logging.getLogger("zonerama_scraper")

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "cs-CZ,cs;q=0.9,en;q=0.8",
}


@dataclass
class FetchedPage:
    """A fetched page: the requested link, where it ended up, and its body."""

    url: str
    final_url: str
    status: int
    html: str

    @property
    def body(self) -> bytes:
        return self.html.encode("utf-8")

    def document(self) -> BeautifulSoup:
        return parse_document(self.html)


class PageFetcher:
    """Fetch client shared by the crawls of one process.

    The Chromium instance is launched lazily on the first rendered fetch and
    reused afterwards; each fetch gets its own browser context. Use as an
    async context manager, or call :meth:`close` when done.
    """

    def __init__(
        self,
        navigation_timeout: float = 30.0,
        wait_after_load: float = 1.0,
        retry_times: int = 2,
    ) -> None:
        self.navigation_timeout = navigation_timeout
        self.wait_after_load = wait_after_load
        self.retry_times = retry_times
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._browser_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: CrawlConfig) -> "PageFetcher":
        return cls(
            navigation_timeout=config.navigation_timeout,
            wait_after_load=config.wait_after_load,
            retry_times=config.retry_times,
        )

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            logger.info("Browser closed")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _ensure_browser(self) -> Browser:
        async with self._browser_lock:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            if self._browser is None:
                self._browser = await self._playwright.chromium.launch(headless=True)
                logger.info("Browser launched")
        return self._browser

    async def render_page(self, link: str) -> FetchedPage:
        """Navigate to ``link`` in headless Chromium and return the rendered HTML."""
        try:
            browser = await self._ensure_browser()
            context = await browser.new_context(user_agent=DEFAULT_HEADERS["User-Agent"])
        except PlaywrightError as exc:
            raise FetchError(link, f"browser unavailable: {exc}") from exc
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(self.navigation_timeout * 1000)
            logger.debug("Rendering %s", link)
            response = await page.goto(link, wait_until="networkidle")
            if self.wait_after_load:
                await page.wait_for_timeout(int(self.wait_after_load * 1000))
            status = response.status if response is not None else 0
            if status >= 400:
                raise FetchError(link, f"HTTP {status}")
            html = await page.content()
            final_url = page.url
        except PlaywrightTimeoutError as exc:
            raise FetchError(link, f"timeout: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(link, str(exc)) from exc
        finally:
            await context.close()
        return FetchedPage(url=link, final_url=final_url, status=status, html=html)

    def _download(self, link: str) -> FetchedPage:
        with requests.Session() as session:
            try:
                resp = session.get(
                    link,
                    headers=DEFAULT_HEADERS,
                    timeout=self.navigation_timeout,
                )
                resp.raise_for_status()
            except requests.RequestException as exc:
                raise FetchError(link, str(exc)) from exc
        return FetchedPage(url=link, final_url=resp.url, status=resp.status_code, html=resp.text)

    async def download_page(self, link: str) -> FetchedPage:
        """Fetch the raw HTML of ``link`` without running any scripts."""
        return await asyncio.to_thread(self._download, link)

    async def fetch(self, link: str, rendered: bool = True) -> Optional[FetchedPage]:
        """Fetch ``link``, retrying failed attempts.

        Returns ``None`` once every attempt has failed; callers treat that
        as a page with no document.
        """
        attempts = 1 + max(0, self.retry_times)

        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "%s (attempt %d/%d), retrying",
                retry_state.outcome.exception(),
                retry_state.attempt_number,
                attempts,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            retry=retry_if_exception_type(FetchError),
            before_sleep=log_retry,
            reraise=True,
        )
        fetch_once = self.render_page if rendered else self.download_page
        try:
            return await retrying(fetch_once, link)
        except FetchError as exc:
            logger.error("%s (giving up after %d attempts)", exc, attempts)
            return None

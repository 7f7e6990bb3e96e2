"""Shared fixtures: canned Zonerama-like pages and an in-memory fetcher."""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from zonerama_scraper.config import CrawlConfig
from zonerama_scraper.fetch import FetchedPage

PROFILE_URL = "https://eu.zonerama.com/Fcbizoni/1234"


def album_url(album_id: int) -> str:
    return f"https://eu.zonerama.com/Fcbizoni/Album/{album_id}"


def tile_html(url: str, date: str = "", photos: str = "", views: str = "", attr: str = "data-url") -> str:
    link_attr = f' data-url="{url}"' if attr == "data-url" else ""
    anchor = f'<a class="thumbnail" href="{url}"></a>' if attr == "thumbnail" else ""
    if attr == "anchor":
        anchor = f'<a href="{url}">open</a>'
    meta = ""
    if date or photos or views:
        meta = f"<p>{date} | <span>{photos}</span> fotek | <span>{views}</span> zhlédnutí</p>"
    return f'<li class="list-alb"{link_attr}>{anchor}{meta}</li>'


def listing_html(tiles: Iterable[str]) -> str:
    return (
        "<html><body><h1>Fcbizoni</h1>"
        f'<ul id="profile-albums">{"".join(tiles)}</ul>'
        "</body></html>"
    )


def album_html(
    album_id: int,
    title: str = "",
    date: str = "",
    photo_ids: Iterable[str] = (),
    photo_count: str = "",
    with_meta: bool = True,
    body: str = "",
) -> str:
    meta = f'<meta property="znrm:album" content="{album_id}">' if with_meta else ""
    items = "".join(
        f'<div data-type="photo" data-id="{pid}">'
        f'<a class="gallery-link" href="/Fcbizoni/Photo/{album_id}/{pid}">'
        f'<img src="https://eu.zonerama.com/photos/{pid}_300x200.jpg"></a></div>'
        for pid in photo_ids
    )
    return (
        f"<html><head>{meta}</head><body>"
        '<div class="row-name-album">'
        f"<h2><span>{title}</span></h2>"
        f'<div class="album-info"><span class="hide-on-phone">| {date}</span></div>'
        f'<span data-id="header-album-photos">{photo_count}</span>'
        "</div>"
        f'<div class="gallery-inner">{items}</div>'
        f"{body}</body></html>"
    )


class FakeFetcher:
    """Serves canned HTML by link; unknown links behave like failed fetches."""

    def __init__(self, pages: Dict[str, Optional[str]], delay: float = 0.0) -> None:
        self.pages = pages
        self.delay = delay
        self.calls: List[Tuple[str, bool]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def links(self) -> List[str]:
        return [link for link, _rendered in self.calls]

    async def fetch(self, link: str, rendered: bool = True) -> Optional[FetchedPage]:
        self.calls.append((link, rendered))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        html = self.pages.get(link)
        if html is None:
            return None
        return FetchedPage(url=link, final_url=link, status=200, html=html)


@pytest.fixture
def crawl_config(tmp_path) -> CrawlConfig:
    return CrawlConfig(debug_dir=tmp_path / "debug", rendered=False)

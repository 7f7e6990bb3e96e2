"""HTML extraction for listing pages and album pages."""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .models import Album, ListingEntry, Photo, PreliminaryMetadata
from .router import ALBUM_HEADER_SELECTOR, ALBUM_META_SELECTOR
from .utils import leading_int, resolve_link

logger = logging.getLogger("zonerama_scraper")

PHOTO_ID_PATTERN = re.compile(r"^\d+$")
PHOTO_PAGE_PATTERN = re.compile(r"/Photo/\d+/(\d+)")
PHOTO_ASSET_PATTERN = re.compile(r"/photos/(\d+)_")

TILE_SELECTORS = ("li.list-alb", "[data-type='album'], li[class*='list-alb']")
PHOTO_ITEM_SELECTORS = ("[data-type='photo'][data-id]", ".gallery-inner [data-id]")


def parse_document(html: str) -> BeautifulSoup:
    """Parse raw HTML into a queryable document."""
    return BeautifulSoup(html, "html.parser")


def primary_image_link(page_url: str, photo_id: str) -> str:
    """Full-size image location, served from the host of the page that listed the photo."""
    host = urlparse(page_url).netloc
    return f"https://{host}/photos/{photo_id}_1500x1000.jpg"


def _text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return node.get_text().strip()


def _select_first_nonempty(soup: BeautifulSoup, selectors: Sequence[str]) -> List[Tag]:
    for selector in selectors:
        found = soup.select(selector)
        if found:
            return found
    return []


def _tile_link(tile: Tag) -> str:
    link = (tile.get("data-url") or "").strip()
    if link:
        return link
    anchor = tile.select_one("a.thumbnail")
    if anchor is not None:
        link = (anchor.get("href") or "").strip()
    if not link:
        anchor = tile.find("a")
        if anchor is not None:
            link = (anchor.get("href") or "").strip()
    return link


def _tile_metadata(tile: Tag) -> PreliminaryMetadata:
    """Read ``<date> | <photos> | <views>`` from the tile's first paragraph."""
    block = tile.find("p")
    if block is None:
        return PreliminaryMetadata()
    full = block.get_text().strip()
    date_text = full.split("|", 1)[0].strip() if full else ""
    spans = block.find_all("span")
    photo_count = leading_int(_text(spans[0])) if len(spans) > 0 else 0
    view_count = leading_int(_text(spans[1])) if len(spans) > 1 else 0
    return PreliminaryMetadata(
        date_text=date_text,
        photo_count=photo_count,
        view_count=view_count,
    )


def extract_entries(soup: BeautifulSoup, base_url: str) -> List[ListingEntry]:
    """Collect album tiles from a listing page in document order.

    No limit is applied here; the crawler sorts the full list before
    truncating it.
    """
    tiles = _select_first_nonempty(soup, TILE_SELECTORS)
    logger.info("listing: found %d album candidates at %s", len(tiles), base_url)
    entries: List[ListingEntry] = []
    for tile in tiles:
        link = resolve_link(base_url, _tile_link(tile))
        if not link:
            continue
        entries.append(ListingEntry(target_link=link, preliminary=_tile_metadata(tile)))
    return entries


PhotoStrategy = Callable[[BeautifulSoup, str, int], List[Photo]]


def _limit_reached(photos: List[Photo], limit: int) -> bool:
    return limit > 0 and len(photos) >= limit


def photos_from_items(soup: BeautifulSoup, page_url: str, limit: int) -> List[Photo]:
    """Elements typed as photos and carrying a numeric ``data-id``."""
    photos: List[Photo] = []
    candidates = _select_first_nonempty(soup, PHOTO_ITEM_SELECTORS)
    logger.debug("album: found %d photo candidates at %s", len(candidates), page_url)
    for element in candidates:
        if _limit_reached(photos, limit):
            break
        photo_id = (element.get("data-id") or "").strip()
        if not PHOTO_ID_PATTERN.match(photo_id):
            continue
        page_link = ""
        anchor = element.select_one("a.gallery-link")
        if anchor is not None:
            page_link = resolve_link(page_url, anchor.get("href"))
        photos.append(
            Photo(
                id=photo_id,
                page_link=page_link,
                primary_image_link=primary_image_link(page_url, photo_id),
            )
        )
    return photos


def photos_from_anchors(soup: BeautifulSoup, page_url: str, limit: int) -> List[Photo]:
    """Anchors pointing at photo detail pages (``/Photo/<album>/<photo>``)."""
    photos: List[Photo] = []
    for anchor in soup.select("a[href*='/Photo/']"):
        if _limit_reached(photos, limit):
            break
        href = (anchor.get("href") or "").strip()
        match = PHOTO_PAGE_PATTERN.search(href)
        if not match or not PHOTO_ID_PATTERN.match(match.group(1)):
            continue
        photo_id = match.group(1)
        photos.append(
            Photo(
                id=photo_id,
                page_link=resolve_link(page_url, href),
                primary_image_link=primary_image_link(page_url, photo_id),
            )
        )
    return photos


def photos_from_images(soup: BeautifulSoup, page_url: str, limit: int) -> List[Photo]:
    """Thumbnails whose source names a photo asset (``/photos/<photo>_...``)."""
    photos: List[Photo] = []
    for image in soup.select("img[src*='/photos/']"):
        if _limit_reached(photos, limit):
            break
        match = PHOTO_ASSET_PATTERN.search((image.get("src") or "").strip())
        if not match:
            continue
        photo_id = match.group(1)
        photos.append(Photo(id=photo_id, primary_image_link=primary_image_link(page_url, photo_id)))
    return photos


# Tried in order; the first strategy returning any photo wins.
PHOTO_STRATEGIES: Sequence[PhotoStrategy] = (
    photos_from_items,
    photos_from_anchors,
    photos_from_images,
)


def extract_photos(soup: BeautifulSoup, page_url: str, limit: int = 0) -> List[Photo]:
    """Run the photo strategies in order; an album without matching markup yields ``[]``."""
    for tier, strategy in enumerate(PHOTO_STRATEGIES, start=1):
        photos = strategy(soup, page_url, limit)
        if photos:
            if tier > 1:
                logger.info(
                    "album: fallback %s found %d photos at %s",
                    strategy.__name__,
                    len(photos),
                    page_url,
                )
            return photos
    return []


def extract_entity(
    soup: BeautifulSoup,
    page_url: str,
    photo_limit: int = 0,
    base_url: Optional[str] = None,
) -> Album:
    """Build an album record from its own page.

    ``page_url`` identifies the album; relative links and the image host are
    taken from ``base_url`` (the address the page was served from) when
    given. ``photo_limit`` of 0 means unlimited.
    """
    album = Album(url=page_url)
    meta = soup.select_one(ALBUM_META_SELECTOR)
    if meta is not None:
        album.id = (meta.get("content") or "").strip()
    album.title = _text(soup.select_one(f"{ALBUM_HEADER_SELECTOR} h2 span"))
    date_text = _text(soup.select_one(f"{ALBUM_HEADER_SELECTOR} .album-info .hide-on-phone"))
    if date_text.startswith("|"):
        date_text = date_text[1:].strip()
    album.date = date_text
    album.photo_count = leading_int(
        _text(soup.select_one(f"{ALBUM_HEADER_SELECTOR} [data-id='header-album-photos']"))
    )
    album.items = extract_photos(soup, base_url or page_url, photo_limit)
    return album

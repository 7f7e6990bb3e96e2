"""Page classification deciding which extraction path a fetched page takes."""

from __future__ import annotations

import logging
from enum import Enum

from bs4 import BeautifulSoup

logger = logging.getLogger("zonerama_scraper")

LISTING_MARKERS = "li.list-alb, #profile-albums"
ALBUM_META_SELECTOR = "meta[property='znrm:album']"
ALBUM_HEADER_SELECTOR = ".row-name-album"


class PageKind(Enum):
    """Outcome of classifying a fetched page."""

    LISTING = "listing"
    ENTITY = "entity"
    DEFAULT_LISTING = "default_listing"

    @property
    def is_listing(self) -> bool:
        return self is not PageKind.ENTITY


def classify(soup: BeautifulSoup) -> PageKind:
    """Classify a parsed page as a listing of albums or a single album.

    Listing markers win over album markers. A page showing neither is
    treated as a listing: an empty tile scan loses nothing, whereas
    scanning a listing for photos would.
    """
    if soup.select_one(LISTING_MARKERS) is not None:
        return PageKind.LISTING
    if soup.select_one(ALBUM_META_SELECTOR) is not None or soup.select_one(ALBUM_HEADER_SELECTOR) is not None:
        return PageKind.ENTITY
    return PageKind.DEFAULT_LISTING

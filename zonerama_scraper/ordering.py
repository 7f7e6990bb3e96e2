"""Date parsing for Czech-style album dates and the newest-first ordering built on it."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .models import Album, ListingEntry

# strptime's %d and %m accept one or two digits, so "%d.%m.%Y" covers both
# "D.M.YYYY" and "DD.MM.YYYY"; a space in a layout matches a run of whitespace.
DATE_LAYOUTS = (
    "%d. %m. %Y",
    "%d. %m.%Y",
    "%d.%m.%Y",
)


def parse_date(text: Optional[str]) -> Tuple[Optional[datetime], bool]:
    """Parse ``text`` with the first matching layout; ``(None, False)`` if none match."""
    text = (text or "").strip()
    if not text:
        return None, False
    for layout in DATE_LAYOUTS:
        try:
            return datetime.strptime(text, layout), True
        except ValueError:
            continue
    return None, False


def date_sort_key(date_text: str, fallback: str) -> Tuple:
    """Sort key placing dated records first (newest first), then undated ones by ``fallback``."""
    parsed, ok = parse_date(date_text)
    if ok:
        return (0, -parsed.toordinal(), "")
    return (1, 0, fallback)


def sort_albums(albums: Iterable[Album]) -> List[Album]:
    """Final result order: newest first, undated albums by title.

    ``sorted`` is stable, so albums with equal keys keep their insertion order.
    """
    return sorted(albums, key=lambda album: date_sort_key(album.date, album.title))


def sort_entries(entries: Iterable[ListingEntry]) -> List[ListingEntry]:
    """Fetch order for listing tiles: newest first, undated tiles by link."""
    return sorted(
        entries,
        key=lambda entry: date_sort_key(entry.preliminary.date_text, entry.target_link),
    )

"""Best-effort dumps of fetched pages for inspecting selector misses."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional

from .fetch import FetchedPage
from .utils import sanitize_filename

logger = logging.getLogger("zonerama_scraper")


def debug_filename(stage: str, url: str) -> str:
    """``<stage>_<12 hex chars of sha1(url)>_<sanitized url>.html``"""
    short = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    return f"{stage}_{short}_{sanitize_filename(url)}.html"


def save_debug(stage: str, page: Optional[FetchedPage], debug_dir: Path) -> Optional[Path]:
    """Write the page body under ``debug_dir``. Failures are logged and ignored."""
    if page is None:
        return None
    destination = debug_dir / debug_filename(stage, page.url)
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(page.body)
    except OSError as exc:
        logger.debug("Failed to write debug dump %s: %s", destination, exc)
        return None
    return destination

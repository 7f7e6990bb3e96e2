"""Utility helpers for link handling and string normalization."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from .errors import InputError

FILENAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]+")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def sanitize_filename(value: str) -> str:
    """Replace every run of characters unsafe in file names with an underscore."""
    return FILENAME_PATTERN.sub("_", value)


def leading_int(text: Optional[str], default: int = 0) -> int:
    """Parse the integer at the start of ``text``; ``default`` when there is none.

    Digit runs too long for ``int()`` also yield ``default``.
    """
    if not text:
        return default
    match = LEADING_INT_PATTERN.match(text)
    if not match:
        return default
    try:
        return int(match.group(1))
    except ValueError:
        return default


def resolve_link(base_url: str, href: Optional[str]) -> str:
    """Return ``href`` as an absolute link, resolved against ``base_url`` when relative."""
    href = (href or "").strip()
    if not href:
        return ""
    if urlparse(href).scheme:
        return href
    return urljoin(base_url, href)


def validate_source_link(
    link: Optional[str],
    allowed_host: str,
    required_path: Optional[str] = None,
) -> str:
    """Check that ``link`` is an http(s) URL on the source site.

    ``required_path`` additionally demands a path segment such as ``/Album/``.
    Raises :class:`InputError` describing the first failed check.
    """
    link = (link or "").strip()
    if not link:
        raise InputError("missing link param")
    parsed = urlparse(link)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputError("invalid link URL")
    hostname = (parsed.hostname or "").lower()
    if hostname != allowed_host and not hostname.endswith("." + allowed_host):
        raise InputError(f"link must point to {allowed_host}")
    if required_path and required_path not in parsed.path:
        raise InputError(f"expected a link containing {required_path}")
    return link

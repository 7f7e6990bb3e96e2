"""Exception types raised by the scraper."""

from __future__ import annotations


class InputError(ValueError):
    """The caller supplied a missing, malformed or out-of-scope link."""


class FetchError(RuntimeError):
    """A single fetch attempt failed (network, timeout, HTTP status or render failure)."""

    def __init__(self, link: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {link}: {reason}")
        self.link = link
        self.reason = reason

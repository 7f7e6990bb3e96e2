"""Configuration objects and constants for the scraper."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger("zonerama_scraper")

DEFAULT_ENTITY_LIMIT = 5
DEFAULT_PHOTO_LIMIT = 10
DEFAULT_CONCURRENCY = 8
DEFAULT_ALLOWED_HOST = "zonerama.com"
DEFAULT_DEBUG_DIR = Path("debug")
DEFAULT_PORT = 7053


@dataclass
class CrawlConfig:
    """Settings that control a single crawl request."""

    entity_limit: int = DEFAULT_ENTITY_LIMIT
    photo_limit: int = DEFAULT_PHOTO_LIMIT
    concurrency: int = DEFAULT_CONCURRENCY
    rendered: bool = True
    debug: bool = False
    debug_dir: Path = DEFAULT_DEBUG_DIR
    navigation_timeout: float = 30.0
    wait_after_load: float = 1.0
    retry_times: int = 2
    crawl_deadline: Optional[float] = None

    def effective_concurrency(self) -> int:
        """Permit pool size: at least 1, at most ``entity_limit`` when it is positive."""
        size = max(1, self.concurrency)
        if self.entity_limit > 0:
            size = min(size, self.entity_limit)
        return size


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("%s is set to %r which is not an integer; using %s", name, raw, default)
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        logger.warning("%s is set to %r which is not a number; using %s", name, raw, default)
        return default


@dataclass
class ServerSettings:
    """Process-wide settings for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    debug_dir: Path = DEFAULT_DEBUG_DIR
    allowed_host: str = DEFAULT_ALLOWED_HOST
    navigation_timeout: float = 30.0
    crawl_deadline: Optional[float] = None

    @classmethod
    def from_env(cls) -> "ServerSettings":
        defaults = cls()
        debug_dir = os.getenv("ZONERAMA_DEBUG_DIR")
        return cls(
            host=os.getenv("ZONERAMA_HOST", defaults.host),
            port=_env_int("ZONERAMA_PORT", defaults.port),
            debug_dir=Path(debug_dir).expanduser() if debug_dir else defaults.debug_dir,
            allowed_host=os.getenv("ZONERAMA_ALLOWED_HOST", defaults.allowed_host),
            navigation_timeout=_env_float("ZONERAMA_TIMEOUT", defaults.navigation_timeout),
            crawl_deadline=_env_float("ZONERAMA_CRAWL_DEADLINE", defaults.crawl_deadline),
        )

    def crawl_config(self, **overrides) -> CrawlConfig:
        """Build a per-request ``CrawlConfig`` seeded from these settings."""
        config = CrawlConfig(
            debug_dir=self.debug_dir,
            navigation_timeout=self.navigation_timeout,
            crawl_deadline=self.crawl_deadline,
        )
        for name, value in overrides.items():
            setattr(config, name, value)
        return config

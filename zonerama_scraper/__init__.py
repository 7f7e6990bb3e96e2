"""Album and photo metadata scraper for Zonerama galleries."""

__version__ = "0.1.0"

"""Data models used throughout the crawl pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Photo:
    """A single photo belonging to an album."""

    id: str
    primary_image_link: str
    page_link: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.page_link:
            data["page_link"] = self.page_link
        data["primary_image_link"] = self.primary_image_link
        return data


@dataclass
class Album:
    """Album metadata plus the photos harvested from its page."""

    url: str
    id: str = ""
    title: str = ""
    date: str = ""
    photo_count: int = 0
    view_count: int = 0
    items: List[Photo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "title": self.title, "url": self.url}
        if self.date:
            data["date"] = self.date
        if self.photo_count:
            data["photo_count"] = self.photo_count
        if self.view_count:
            data["view_count"] = self.view_count
        data["items"] = [photo.to_dict() for photo in self.items]
        return data


@dataclass(frozen=True)
class PreliminaryMetadata:
    """Fields scraped from a listing tile before the album page is fetched."""

    date_text: str = ""
    photo_count: int = 0
    view_count: int = 0


@dataclass(frozen=True)
class ListingEntry:
    """Album link discovered on a listing page."""

    target_link: str
    preliminary: PreliminaryMetadata = field(default_factory=PreliminaryMetadata)


@dataclass
class CrawlResult:
    """Response payload for one crawl request."""

    input_link: str
    entities: List[Album] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_link": self.input_link,
            "entities": [album.to_dict() for album in self.entities],
        }

"""Gap-filling merge of listing-tile metadata into album records."""

from __future__ import annotations

from dataclasses import replace

from .models import Album, PreliminaryMetadata


def merge_preliminary(album: Album, preliminary: PreliminaryMetadata) -> Album:
    """Fill empty album fields from the tile metadata gathered on the listing.

    Values read from the album page itself are authoritative and never
    overwritten, so merging the same metadata twice changes nothing.
    """
    changes = {}
    date_text = preliminary.date_text.strip()
    if not album.date.strip() and date_text:
        changes["date"] = date_text
    if album.photo_count == 0 and preliminary.photo_count > 0:
        changes["photo_count"] = preliminary.photo_count
    if album.view_count == 0 and preliminary.view_count > 0:
        changes["view_count"] = preliminary.view_count
    if not changes:
        return album
    return replace(album, **changes)

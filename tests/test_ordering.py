from datetime import datetime

import pytest

from zonerama_scraper.models import Album, ListingEntry, PreliminaryMetadata
from zonerama_scraper.ordering import parse_date, sort_albums, sort_entries


@pytest.mark.parametrize(
    "text",
    ["20. 9. 2025", "20. 9.2025", "20.9.2025", "20.09.2025", "  20.  9.  2025 "],
)
def test_parse_date_layouts(text):
    assert parse_date(text) == (datetime(2025, 9, 20), True)


def test_parse_date_single_digit_day_and_month():
    assert parse_date("1. 2. 2024") == (datetime(2024, 2, 1), True)


@pytest.mark.parametrize("text", ["", None, "yesterday", "2025-09-20", "20. září 2025", "31. 2. 2024"])
def test_parse_date_rejects_other_text(text):
    assert parse_date(text) == (None, False)


def test_sort_albums_newest_first_with_undated_last():
    albums = [
        Album(url="u1", title="old", date="1. 1. 2024"),
        Album(url="u2", title="b-undated"),
        Album(url="u3", title="new", date="20. 9. 2025"),
        Album(url="u4", title="a-undated", date="sometime"),
    ]
    assert [a.title for a in sort_albums(albums)] == ["new", "old", "a-undated", "b-undated"]


def test_sort_albums_is_stable_on_equal_dates():
    albums = [Album(url=f"u{i}", title=f"t{i}", date="3. 3. 2023") for i in (3, 1, 2)]
    assert [a.url for a in sort_albums(albums)] == ["u3", "u1", "u2"]


def test_sort_entries_falls_back_to_link_for_undated_tiles():
    entries = [
        ListingEntry("https://eu.zonerama.com/a/Album/2"),
        ListingEntry("https://eu.zonerama.com/a/Album/1"),
        ListingEntry("https://eu.zonerama.com/a/Album/9", PreliminaryMetadata("1. 1. 2020")),
    ]
    assert [e.target_link[-1] for e in sort_entries(entries)] == ["9", "1", "2"]

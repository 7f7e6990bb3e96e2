from zonerama_scraper.merge import merge_preliminary
from zonerama_scraper.models import Album, PreliminaryMetadata


def test_fills_empty_fields():
    album = Album(url="https://eu.zonerama.com/a/Album/1", title="Trip")
    merged = merge_preliminary(album, PreliminaryMetadata(" 20. 9. 2025 ", 12, 340))
    assert merged.date == "20. 9. 2025"
    assert merged.photo_count == 12
    assert merged.view_count == 340
    assert merged.title == "Trip"


def test_never_overwrites_page_values():
    album = Album(url="u", date="1. 1. 2024", photo_count=5, view_count=9)
    merged = merge_preliminary(album, PreliminaryMetadata("20. 9. 2025", 12, 340))
    assert (merged.date, merged.photo_count, merged.view_count) == ("1. 1. 2024", 5, 9)


def test_blank_date_counts_as_empty():
    album = Album(url="u", date="   ")
    assert merge_preliminary(album, PreliminaryMetadata("2.3.2021")).date == "2.3.2021"


def test_empty_preliminary_is_a_no_op():
    album = Album(url="u", title="Trip", photo_count=3)
    assert merge_preliminary(album, PreliminaryMetadata()) == album


def test_merge_is_idempotent():
    album = Album(url="u", photo_count=4)
    preliminary = PreliminaryMetadata("5. 6. 2022", 10, 77)
    once = merge_preliminary(album, preliminary)
    assert merge_preliminary(once, preliminary) == once
    assert album.date == ""

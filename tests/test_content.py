from zonerama_scraper.content import (
    PHOTO_STRATEGIES,
    extract_entity,
    extract_entries,
    extract_photos,
    parse_document,
    primary_image_link,
)

from .conftest import PROFILE_URL, album_html, album_url, listing_html, tile_html

ALBUM_URL = album_url(100)


def test_primary_image_link_uses_page_host():
    assert (
        primary_image_link("https://cz.zonerama.com/x/Album/1", "55")
        == "https://cz.zonerama.com/photos/55_1500x1000.jpg"
    )


def test_entity_fields():
    html = album_html(100, title=" Summer trip ", date="20. 9. 2025", photo_count="42 fotek", photo_ids=["11"])
    album = extract_entity(parse_document(html), ALBUM_URL)
    assert album.id == "100"
    assert album.title == "Summer trip"
    assert album.date == "20. 9. 2025"
    assert album.photo_count == 42
    assert album.view_count == 0
    assert album.url == ALBUM_URL


def test_entity_page_without_markup_yields_empty_album():
    album = extract_entity(parse_document("<html><body></body></html>"), ALBUM_URL)
    assert album.id == ""
    assert album.title == ""
    assert album.date == ""
    assert album.photo_count == 0
    assert album.items == []


def test_typed_photo_items_respect_limit_in_document_order():
    html = album_html(100, photo_ids=["11", "12", "13"])
    album = extract_entity(parse_document(html), ALBUM_URL, photo_limit=2)
    assert [p.id for p in album.items] == ["11", "12"]
    first = album.items[0]
    assert first.page_link == "https://eu.zonerama.com/Fcbizoni/Photo/100/11"
    assert first.primary_image_link == "https://eu.zonerama.com/photos/11_1500x1000.jpg"


def test_zero_photo_limit_means_unlimited():
    html = album_html(100, photo_ids=[str(i) for i in range(1, 26)])
    assert len(extract_entity(parse_document(html), ALBUM_URL, photo_limit=0).items) == 25


def test_non_numeric_item_ids_are_skipped():
    html = album_html(100, photo_ids=["abc", "12", "1x"])
    assert [p.id for p in extract_photos(parse_document(html), ALBUM_URL)] == ["12"]


def test_gallery_inner_items_are_secondary_tier_one_selector():
    html = '<div class="gallery-inner"><div data-id="31"></div><div data-id="32"></div></div>'
    photos = extract_photos(parse_document(html), ALBUM_URL)
    assert [p.id for p in photos] == ["31", "32"]
    assert photos[0].page_link == ""


def test_falls_back_to_photo_detail_anchors():
    html = (
        "<html><body>"
        '<a href="/Fcbizoni/Photo/100/21">one</a>'
        '<a href="/Fcbizoni/Album/100">album</a>'
        '<a href="https://eu.zonerama.com/Fcbizoni/Photo/100/22">two</a>'
        "</body></html>"
    )
    album = extract_entity(parse_document(html), ALBUM_URL)
    assert [(p.id, p.page_link) for p in album.items] == [
        ("21", "https://eu.zonerama.com/Fcbizoni/Photo/100/21"),
        ("22", "https://eu.zonerama.com/Fcbizoni/Photo/100/22"),
    ]


def test_falls_back_to_photo_assets():
    html = (
        '<img src="https://eu.zonerama.com/photos/41_300x200.jpg">'
        '<img src="/static/logo.png">'
        '<img src="/photos/42_300x200.jpg">'
    )
    photos = extract_photos(parse_document(html), ALBUM_URL, limit=5)
    assert [(p.id, p.page_link) for p in photos] == [("41", ""), ("42", "")]


def test_first_tier_with_results_wins():
    html = album_html(100, photo_ids=["11"], body='<a href="/x/Photo/100/99">other</a>')
    assert [p.id for p in extract_photos(parse_document(html), ALBUM_URL)] == ["11"]


def test_image_host_follows_base_url():
    html = album_html(100, photo_ids=["11"])
    album = extract_entity(parse_document(html), ALBUM_URL, base_url="https://cz.zonerama.com/Fcbizoni/Album/100")
    assert album.url == ALBUM_URL
    assert album.items[0].primary_image_link == "https://cz.zonerama.com/photos/11_1500x1000.jpg"
    assert album.items[0].page_link == "https://cz.zonerama.com/Fcbizoni/Photo/100/11"


def test_strategies_share_one_signature():
    soup = parse_document("<html></html>")
    for strategy in PHOTO_STRATEGIES:
        assert strategy(soup, ALBUM_URL, 0) == []


def test_listing_entries_with_preliminary_metadata():
    html = listing_html(
        [
            tile_html("/Fcbizoni/Album/1", "20. 9. 2025", "12", "340"),
            tile_html(album_url(2), "1. 1. 2024", "7", "", attr="thumbnail"),
            tile_html("/Fcbizoni/Album/3", attr="anchor"),
            '<li class="list-alb"><p>no link</p></li>',
        ]
    )
    entries = extract_entries(parse_document(html), PROFILE_URL)
    assert [e.target_link for e in entries] == [album_url(1), album_url(2), album_url(3)]
    first = entries[0].preliminary
    assert (first.date_text, first.photo_count, first.view_count) == ("20. 9. 2025", 12, 340)
    second = entries[1].preliminary
    assert (second.date_text, second.photo_count, second.view_count) == ("1. 1. 2024", 7, 0)
    third = entries[2].preliminary
    assert (third.date_text, third.photo_count, third.view_count) == ("", 0, 0)


def test_listing_falls_back_to_album_typed_tiles():
    html = '<div><div data-type="album" data-url="/Fcbizoni/Album/5"></div></div>'
    entries = extract_entries(parse_document(html), PROFILE_URL)
    assert [e.target_link for e in entries] == [album_url(5)]


def test_listing_without_tiles_is_empty():
    assert extract_entries(parse_document("<html><body></body></html>"), PROFILE_URL) == []

from picklist.extract import extract_detail, extract_listing

from conftest import BASE_URL, DETAIL_1_HTML, DETAIL_2_HTML, ORDER_1, ORDER_2


def test_listing_returns_one_stub_per_valid_row(listing_html):
    stubs = extract_listing(listing_html, BASE_URL)
    assert [s.order_number for s in stubs] == ["100-1", "100-2"]
    assert [s.detail_address for s in stubs] == [ORDER_1, ORDER_2]


def test_listing_items_include_collapsed_ones_and_pair_images(listing_html):
    stub = extract_listing(listing_html, BASE_URL)[1]
    assert [i.display_name for i in stub.list_items] == ["Blue Album", "Red Single"]
    # data-src used when src is missing; src preferred when both exist
    assert stub.list_items[0].image_address == "https://img.example/blue-thumb.jpg"
    assert stub.list_items[1].image_address == "https://img.example/red-thumb.jpg"


def test_declared_count_from_label_else_link_count(listing_html):
    first, second = extract_listing(listing_html, BASE_URL)
    assert first.declared_item_count == 1
    assert second.declared_item_count == 2


def test_listing_without_base_url_keeps_relative_addresses(listing_html):
    stubs = extract_listing(listing_html)
    assert stubs[0].detail_address == "/sell/order/100-1"


def test_listing_ignores_garbage():
    assert extract_listing("") == []
    assert extract_listing("<html><body><p>Sign in</p></body></html>") == []


def test_detail_items_with_locations():
    items = extract_detail(DETAIL_1_HTML)
    assert len(items) == 1
    assert items[0].display_name == "Blue Album"
    assert items[0].image_address == "https://img.example/blue-full.jpg"
    assert items[0].location == "A12"


def test_detail_skips_fragments_without_name_link():
    items = extract_detail(DETAIL_2_HTML)
    assert [(i.display_name, i.location) for i in items] == [
        ("Blue Album", "A12"),
        ("Red Single", ""),
    ]
    assert items[1].image_address == ""

from __future__ import annotations

from typing import List, Union

from bs4 import BeautifulSoup, Tag
from loguru import logger

from .config import (
    DETAIL_ITEM_SELECTOR,
    DETAIL_NAME_SELECTOR,
    ITEM_COUNT_RE,
    ITEM_LINK_SELECTOR,
    LISTING_ITEM_CELL_SELECTOR,
    LISTING_ORDER_LINK_SELECTOR,
    LISTING_ROW_SELECTOR,
    DetailItem,
    ListItem,
    OrderStub,
)
from .location import resolve_location
from .utils.text_clean import clean_text
from .utils.urls import absolute_url

Document = Union[str, bytes, BeautifulSoup, Tag]


def parse_document(doc: Document) -> Tag:
    """Accept raw HTML or an already-parsed tree; never re-parses a tree."""
    if isinstance(doc, Tag):
        return doc
    return BeautifulSoup(doc or "", "lxml")


def image_source(img: Tag | None) -> str:
    """`src` wins over the lazy-load `data-src`."""
    if img is None:
        return ""
    return (img.get("src") or img.get("data-src") or "").strip()


def _declared_count(cell: Tag, found: int) -> int:
    m = ITEM_COUNT_RE.search(cell.get_text(" "))
    return int(m.group(1)) if m else found


def _parse_order_row(row: Tag, base_url: str) -> OrderStub | None:
    order_link = row.select_one(LISTING_ORDER_LINK_SELECTOR)
    cell = row.select_one(LISTING_ITEM_CELL_SELECTOR)
    if order_link is None or cell is None:
        return None

    number = clean_text(order_link.get_text())
    href = order_link.get("href", "")
    if not number or not href:
        return None

    images = [image_source(img) for img in cell.find_all("img")]
    links = cell.select(ITEM_LINK_SELECTOR)
    items: List[ListItem] = []
    for idx, link in enumerate(links):
        items.append(
            ListItem(
                display_name=clean_text(link.get_text()),
                image_address=absolute_url(base_url, images[idx]) if idx < len(images) else "",
            )
        )

    return OrderStub(
        order_number=number,
        detail_address=absolute_url(base_url, href),
        list_items=items,
        declared_item_count=_declared_count(cell, len(items)),
    )


def extract_listing(doc: Document, base_url: str = "") -> List[OrderStub]:
    """
    Project the seller's order listing into OrderStubs, in page order.
    Rows without an order link or an item cell are skipped.
    """
    root = parse_document(doc)
    stubs: List[OrderStub] = []
    rows = root.select(LISTING_ROW_SELECTOR)
    for row in rows:
        stub = _parse_order_row(row, base_url)
        if stub is None:
            logger.debug("Skipping order row without number/items: id={}", row.get("id"))
            continue
        stubs.append(stub)
    logger.info("Extracted {} orders from {} listing rows", len(stubs), len(rows))
    return stubs


def extract_detail(doc: Document, base_url: str = "") -> List[DetailItem]:
    """Project an order detail page into DetailItems, in page order."""
    root = parse_document(doc)
    items: List[DetailItem] = []
    for fragment in root.select(DETAIL_ITEM_SELECTOR):
        name_link = fragment.select_one(DETAIL_NAME_SELECTOR)
        if name_link is None:
            continue
        name = clean_text(name_link.get_text())
        if not name:
            continue
        items.append(
            DetailItem(
                display_name=name,
                image_address=absolute_url(base_url, image_source(fragment.find("img"))),
                location=resolve_location(fragment),
            )
        )
    return items

from __future__ import annotations

"""
Join listing items to detail items by name and put location badges on the
listing page.

Everything up to `plan_badges` is pure. `ListingPage` is the only object that
touches the listing tree, and `annotate` is the only caller that asks it to
change anything.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag
from loguru import logger

from .config import (
    BADGE_CLASS,
    BADGE_LOCATION_ATTR,
    ITEM_LINK_SELECTOR,
    LISTING_ITEM_CELL_SELECTOR,
    LISTING_ORDER_LINK_SELECTOR,
    LISTING_ROW_SELECTOR,
    DetailItem,
    ListItem,
    OrderStub,
)
from .extract import Document, parse_document
from .utils.text_clean import clean_text


@dataclass(frozen=True)
class BadgeKey:
    """Identifies one item link on the listing: its order and its position in the item cell."""

    order_number: str
    position: int


@dataclass(frozen=True)
class BadgePlacement:
    key: BadgeKey
    location: str


AnnotationModel = FrozenSet[Tuple[BadgeKey, str]]


def match_detail(item: ListItem, detail_items: Sequence[DetailItem]) -> Optional[DetailItem]:
    """First detail item with exactly the same display name."""
    for detail in detail_items:
        if detail.display_name == item.display_name:
            return detail
    return None


def has_badge(existing: AnnotationModel, key: BadgeKey, location: str) -> bool:
    return (key, location) in existing


def plan_badges(
    stub: OrderStub,
    detail_items: Sequence[DetailItem],
    existing: AnnotationModel = frozenset(),
) -> List[BadgePlacement]:
    placements: List[BadgePlacement] = []
    for position, item in enumerate(stub.list_items):
        match = match_detail(item, detail_items)
        if match is None:
            logger.debug("No detail match for '{}' in order {}", item.display_name, stub.order_number)
            continue
        if not match.location:
            continue
        key = BadgeKey(stub.order_number, position)
        if has_badge(existing, key, match.location):
            continue
        placements.append(BadgePlacement(key, match.location))
    return placements


class ListingPage:
    """
    Mutable view over a parsed listing document.

    Item links are addressed by BadgeKey so the join logic never holds on to
    tree nodes.
    """

    def __init__(self, doc: Document) -> None:
        root = parse_document(doc)
        self.soup: Tag = root
        self._links: Dict[str, List[Tag]] = {}
        self._index()

    def _index(self) -> None:
        for row in self.soup.select(LISTING_ROW_SELECTOR):
            order_link = row.select_one(LISTING_ORDER_LINK_SELECTOR)
            cell = row.select_one(LISTING_ITEM_CELL_SELECTOR)
            if order_link is None or cell is None:
                continue
            number = clean_text(order_link.get_text())
            if number:
                self._links.setdefault(number, cell.select(ITEM_LINK_SELECTOR))

    def item_links(self, order_number: str) -> List[Tag]:
        return list(self._links.get(order_number, []))

    def _link(self, key: BadgeKey) -> Optional[Tag]:
        links = self.item_links(key.order_number)
        return links[key.position] if 0 <= key.position < len(links) else None

    def _badges_before(self, link: Tag) -> Iterable[Tag]:
        parent = link.parent
        if parent is None:
            return []
        return parent.find_all("span", class_=BADGE_CLASS, recursive=False)

    def existing_badges(self, order_number: Optional[str] = None) -> AnnotationModel:
        found = set()
        numbers = [order_number] if order_number is not None else list(self._links)
        for number in numbers:
            for position, link in enumerate(self.item_links(number)):
                for badge in self._badges_before(link):
                    if badge.find_next_sibling("a") is not link:
                        continue
                    found.add((BadgeKey(number, position), badge.get(BADGE_LOCATION_ATTR, "")))
        return frozenset(found)

    def attach_badge(self, key: BadgeKey, location: str) -> bool:
        link = self._link(key)
        if link is None:
            return False
        badge = self._new_badge(location)
        link.insert_before(badge)
        return True

    def _new_badge(self, location: str) -> Tag:
        factory = self.soup if isinstance(self.soup, BeautifulSoup) else BeautifulSoup("", "lxml")
        badge = factory.new_tag("span")
        badge["class"] = [BADGE_CLASS]
        badge[BADGE_LOCATION_ATTR] = location
        badge.string = location
        return badge

    def badge_count(self) -> int:
        return len(self.soup.find_all("span", class_=BADGE_CLASS))

    def html(self) -> str:
        return str(self.soup)


def annotate(stub: OrderStub, detail_items: Sequence[DetailItem], page: ListingPage) -> None:
    """Badge every listing item whose joined detail item has a location. Idempotent."""
    existing = page.existing_badges(stub.order_number)
    for placement in plan_badges(stub, detail_items, existing):
        if not page.attach_badge(placement.key, placement.location):
            logger.debug("Item link vanished for {}", placement.key)

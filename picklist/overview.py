from __future__ import annotations

"""
Location overview for a single order detail page: a grid of cover images
labelled with their storage location, sorted so items in the same location
sit together.
"""

import json
from html import escape
from typing import List, Sequence, Tuple

from loguru import logger

from .config import (
    OVERVIEW_GALLERY_SELECTOR,
    OVERVIEW_IMAGE_SIZE,
    OVERVIEW_ROW_SELECTOR,
    OVERVIEW_THUMB_SELECTOR,
    OVERVIEW_TITLE_SELECTOR,
    OverviewItem,
)
from .extract import Document, parse_document
from .utils.text_clean import clean_text


def _gallery_image(row) -> str:
    gallery = row.select_one(OVERVIEW_GALLERY_SELECTOR)
    if gallery is None:
        return ""
    raw = gallery.get("data-images")
    if not raw:
        return ""
    try:
        images = json.loads(raw)
    except ValueError as e:
        logger.debug("Unparseable gallery data: {}", e)
        return ""
    if isinstance(images, list) and images and isinstance(images[0], dict):
        return str(images[0].get("full") or "")
    return ""


def _thumbnail_image(row) -> str:
    thumb = row.select_one(OVERVIEW_THUMB_SELECTOR)
    return (thumb.get("src") or "").strip() if thumb is not None else ""


def extract_overview_items(doc: Document) -> List[OverviewItem]:
    root = parse_document(doc)
    items: List[OverviewItem] = []
    for row in root.select(OVERVIEW_ROW_SELECTOR):
        item_id = row.get("data-id")
        image = _gallery_image(row) or _thumbnail_image(row)
        if not image or not item_id:
            continue
        title_link = row.select_one(OVERVIEW_TITLE_SELECTOR)
        title = clean_text(title_link.get_text()) if title_link is not None else ""
        items.append(
            OverviewItem(
                item_id=item_id,
                image_address=image,
                location=(row.get("data-location") or "").strip(),
                title=title or "Unknown Item",
            )
        )
    return items


def sort_by_location(items: Sequence[OverviewItem]) -> List[OverviewItem]:
    """Stable sort by location, items without one last."""
    return sorted(items, key=lambda it: (it.location == "", it.location.casefold()))


def location_groups(items: Sequence[OverviewItem]) -> List[Tuple[OverviewItem, int]]:
    """Pair each item with a 0/1 color index that flips whenever the location changes."""
    out: List[Tuple[OverviewItem, int]] = []
    current = None
    color = 0
    for item in items:
        if item.location != current:
            current = item.location
            color = (color + 1) % 2
        out.append((item, color))
    return out


OVERVIEW_STYLE = f"""
.location-overview-container{{display:flex;flex-wrap:wrap;gap:8px;align-items:flex-start;}}
.location-item{{flex-shrink:0;text-align:center;border:2px solid #ccc;border-radius:4px;overflow:hidden;}}
.location-item.location-color-0{{background:#e3f2fd;}}
.location-item.location-color-1{{background:#fff3e0;}}
.location-item img{{width:{OVERVIEW_IMAGE_SIZE}px;height:{OVERVIEW_IMAGE_SIZE}px;object-fit:contain;display:block;background:#fff;}}
.location-label{{font-size:16px;font-weight:bold;color:#000;padding:4px 8px;text-align:center;}}
"""


def render_overview(items: Sequence[OverviewItem]) -> str:
    cards = []
    for item, color in location_groups(sort_by_location(items)):
        hover = f"{item.title}\n\nLocation: {item.location or 'None'}"
        cards.append(
            f'<div class="location-item location-color-{color}" data-item-id="{escape(item.item_id)}" '
            f'title="{escape(hover)}">'
            f'<img src="{escape(item.image_address)}" alt="{escape(item.title)}" />'
            f'<div class="location-label">{escape(item.location or "—")}</div>'
            "</div>"
        )
    return (
        "<html><head><title>Location Overview</title>"
        f"<style>{OVERVIEW_STYLE}</style></head><body>"
        f'<div id="location-overview-panel"><div class="location-overview-container">{"".join(cards)}</div></div>'
        "</body></html>"
    )

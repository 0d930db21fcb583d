from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

OUTPUT_DIR = Path(os.getenv("PICKLIST_OUTPUT_DIR", str(PROJECT_ROOT / "output")))
PICK_LIST_PATH = OUTPUT_DIR / "pick_list.html"
OVERVIEW_PATH = OUTPUT_DIR / "location_overview.html"


# ---------------------------
# Marketplace
# ---------------------------

MARKETPLACE_BASE_URL = os.getenv("MARKETPLACE_BASE_URL", "https://www.discogs.com")
LISTING_PATH = "/sell/orders"

# Listing pages the pipeline refuses to run on (query key -> value)
EXCLUDED_LISTING_FILTERS = {
    "status": "Shipped",
    "archived": "Y",
}


# ---------------------------
# Markup contract (listing document)
# ---------------------------

LISTING_ROW_SELECTOR = 'table.marketplace-table tbody tr[id^="order"]'
LISTING_ORDER_LINK_SELECTOR = ".order_number a"
LISTING_ITEM_CELL_SELECTOR = ".order_item_name"
ITEM_LINK_SELECTOR = 'a[href*="/release/"]'
ITEM_COUNT_RE = re.compile(r"(\d+)\s*Item")


# ---------------------------
# Markup contract (detail document)
# ---------------------------

DETAIL_ITEM_SELECTOR = "td.order_item"
DETAIL_NAME_SELECTOR = '.order-item-info a[href*="/release/"]'

LOCATION_MARKER = "Location:"
LOCATION_LINE_RE = re.compile(r"Location:\s*([^\n\r]+)")
LOCATION_TOKEN_RE = re.compile(r"Location:\s*([A-Za-z0-9]+)")

OVERVIEW_ROW_SELECTOR = ".order-item-row"
OVERVIEW_TITLE_SELECTOR = ".order-item-info a"
OVERVIEW_GALLERY_SELECTOR = ".image_gallery"
OVERVIEW_THUMB_SELECTOR = ".thumbnail_link img, .image_gallery img"
OVERVIEW_IMAGE_SIZE = 180


# ---------------------------
# Badges
# ---------------------------

BADGE_CLASS = "location-badge"
BADGE_LOCATION_ATTR = "data-location"


# ---------------------------
# Fetch / HTTP hardening
# ---------------------------

HTTP_CONNECT_TIMEOUT = 5.0
HTTP_READ_TIMEOUT = 10.0
HTTP_MAX_REDIRECTS = 3
HTTP_MAX_BYTES = 2_000_000  # 2 MB cap, detail pages are ~300 KB

HTTP_USER_AGENT = (
    "order-picklist/1.0 (+https://example.com; contact=ops@placeholder.com)"
)

# Whole-request ceilings on top of httpx's per-phase timeouts
FETCH_TIMEOUT_SECONDS = float(os.getenv("PICKLIST_FETCH_TIMEOUT", "15"))
IMAGE_TIMEOUT_SECONDS = float(os.getenv("PICKLIST_IMAGE_TIMEOUT", "10"))

# Seller pages need a logged-in session; pass the browser's Cookie header through
SESSION_COOKIE = os.getenv("PICKLIST_SESSION_COOKIE", "")


# ---------------------------
# Logging / observability
# ---------------------------

LOG_DIR = Path(os.getenv("PICKLIST_LOG_DIR", str(PROJECT_ROOT / "logs")))
LOG_LEVEL = os.getenv("PICKLIST_LOG_LEVEL", "INFO")


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class ListItem(BaseModel):
    """
    One item as echoed on the listing page.
    `display_name` is the join key and is not unique within an order.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str
    image_address: str = ""


class DetailItem(BaseModel):
    """
    One item parsed from an order's detail page.
    An empty `location` means it could not be resolved.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str
    image_address: str = ""
    location: str = ""


class OrderStub(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_number: str
    detail_address: str
    list_items: List[ListItem] = Field(default_factory=list)
    declared_item_count: int = Field(default=0, ge=0)


class PickListOrder(BaseModel):
    """
    An order as it appears on the printed pick list.
    `item_count` is the resolved count, not the listing's declared one.
    """

    order_number: str
    items: List[DetailItem] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)


class OverviewItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str
    image_address: str
    location: str = ""
    title: str = "Unknown Item"


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str

from __future__ import annotations

from typing import List, Optional

from loguru import logger

from .annotate import ListingPage, annotate
from .compiler import PrintDocument, Progress, RenderSurface, compile_pick_list, resolve_orders
from .config import PickListOrder
from .detail_cache import DetailCache
from .extract import Document, extract_listing


async def annotate_listing(doc: Document, cache: DetailCache, base_url: str = "") -> ListingPage:
    """
    Badge every order on a listing page with its items' storage locations.

    Orders are resolved one after another; a detail page that cannot be
    fetched simply leaves that order's items without badges.
    """
    page = ListingPage(doc)
    stubs = extract_listing(page.soup, base_url)
    for stub in stubs:
        items = await cache.get_detail(stub.detail_address)
        annotate(stub, items, page)
    logger.info("Annotated {} orders; {} badges on page", len(stubs), page.badge_count())
    return page


async def pick_list_orders(doc: Document, cache: DetailCache, base_url: str = "") -> List[PickListOrder]:
    return await resolve_orders(extract_listing(doc, base_url), cache)


async def print_pick_list(
    doc: Document,
    cache: DetailCache,
    surface: RenderSurface,
    base_url: str = "",
    progress: Optional[Progress] = None,
) -> PrintDocument:
    stubs = extract_listing(doc, base_url)
    return await compile_pick_list(stubs, cache, surface, progress)

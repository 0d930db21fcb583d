from __future__ import annotations

"""
Pick-list compiler.

Resolves detail items for every listed order (one at a time, in listing
order), renders them into one printable HTML document, hands it to a render
surface and prints only after every image on that surface has loaded or
failed.
"""

import asyncio
import webbrowser
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from .config import IMAGE_TIMEOUT_SECONDS, DetailItem, OrderStub, PickListOrder
from .detail_cache import DetailCache, http_client
from .print_barrier import PrintBarrier
from .utils.text_clean import plural
from .utils.urls import absolute_url

Progress = Callable[[str], None]

PICK_LIST_STYLE = "\n".join(
    [
        "body{font-family:Arial,Helvetica,sans-serif;padding:20px;}",
        "h1{font-size:24px;margin-bottom:20px;}",
        "h2{margin-top:25px;font-size:18px;}",
        ".location{color:#e74c3c;font-weight:bold;margin-left:10px;}",
        ".item{display:flex;align-items:center;margin-left:20px;margin-bottom:8px;}",
        ".item img{width:60px;height:60px;object-fit:cover;margin-right:10px;"
        "border-radius:4px;box-shadow:0 1px 4px rgba(0,0,0,0.3);}",
        ".item-info{flex:1;}",
    ]
)


@dataclass
class PrintDocument:
    """Handle to a compiled pick list."""

    html: str
    orders: List[PickListOrder] = field(default_factory=list)
    image_count: int = 0
    printed: bool = False

    @property
    def item_count(self) -> int:
        return sum(o.item_count for o in self.orders)


class RenderSurface(Protocol):
    def open(self, html: str) -> List[str]:
        """Show the document; return the `src` of every image in it."""

    async def load_image(self, src: str) -> bool:
        """Settle one image. True = loaded, False = errored. Must not raise."""

    def print_document(self) -> None:
        ...


def _item_row(item: DetailItem) -> str:
    img = f'<img src="{escape(item.image_address)}">' if item.image_address else ""
    loc = (
        f'<span class="location">Location: {escape(item.location)}</span>'
        if item.location
        else ""
    )
    return f'<div class="item">{img}<div class="item-info"><span>{escape(item.display_name)}</span>{loc}</div></div>'


def render_pick_list(orders: Sequence[PickListOrder], title: str = "Order Pick List") -> str:
    parts = [
        f"<html><head><title>{escape(title)}</title>",
        f"<style>{PICK_LIST_STYLE}</style>",
        "</head><body>",
        f"<h1>{escape(title)}</h1>",
    ]
    for order in orders:
        parts.append(f"<h2>Order {escape(order.order_number)} - {plural(order.item_count, 'Item')}</h2>")
        parts.extend(_item_row(item) for item in order.items)
    parts.append("</body></html>")
    return "".join(parts)


def image_sources(html: str) -> List[str]:
    soup = BeautifulSoup(html, "lxml")
    return [img.get("src", "") for img in soup.find_all("img")]


async def resolve_orders(
    stubs: Sequence[OrderStub],
    cache: DetailCache,
    progress: Optional[Progress] = None,
) -> List[PickListOrder]:
    """Sequential on purpose: one detail request in flight against the marketplace at a time."""
    orders: List[PickListOrder] = []
    total = len(stubs)
    for idx, stub in enumerate(stubs, start=1):
        if progress is not None:
            progress(f"Loading order {idx} of {total}...")
        items = await cache.get_detail(stub.detail_address)
        orders.append(PickListOrder(order_number=stub.order_number, items=list(items)))
    return orders


async def print_when_ready(surface: RenderSurface, html: str) -> PrintDocument:
    document = PrintDocument(html=html)

    def _print() -> None:
        surface.print_document()
        document.printed = True

    sources = surface.open(html)
    document.image_count = len(sources)
    barrier = PrintBarrier(len(sources), _print)
    barrier.start()

    async def _settle(src: str) -> None:
        try:
            ok = await surface.load_image(src)
        except Exception as e:
            logger.warning("Image load raised for {}: {}", src, e)
            ok = False
        if not ok:
            logger.debug("Image failed to load: {}", src)
        barrier.arrive()

    await asyncio.gather(*(_settle(src) for src in sources))
    return document


async def compile_pick_list(
    stubs: Sequence[OrderStub],
    cache: DetailCache,
    surface: RenderSurface,
    progress: Optional[Progress] = None,
) -> PrintDocument:
    orders = await resolve_orders(stubs, cache, progress)
    html = render_pick_list(orders)
    document = await print_when_ready(surface, html)
    document.orders = orders
    logger.info(
        "Pick list compiled: {} orders, {} items, {} images",
        len(orders),
        document.item_count,
        document.image_count,
    )
    return document


def open_in_browser(path: Path) -> None:
    webbrowser.open(path.resolve().as_uri())


class FileSurface:
    """
    Writes the pick list to disk and "loads" its images over HTTP.

    The print action runs once the barrier lets it through; by default it
    opens the file in the system browser where the print dialog is one
    keystroke away.
    """

    def __init__(
        self,
        path: Path,
        base_url: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = IMAGE_TIMEOUT_SECONDS,
        print_action: Callable[[Path], None] = open_in_browser,
    ) -> None:
        self.path = Path(path)
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self._print_action = print_action

    def open(self, html: str) -> List[str]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(html, encoding="utf-8")
        logger.info("Pick list written to {}", self.path)
        return image_sources(html)

    async def load_image(self, src: str) -> bool:
        if not src:
            return False
        if src.startswith("data:"):
            return True
        if self._client is None:
            self._client = http_client()
        url = absolute_url(self.base_url, src)
        try:
            r = await asyncio.wait_for(self._client.get(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Image timed out after {}s: {}", self.timeout, url)
            return False
        except httpx.HTTPError as e:
            logger.warning("Image fetch failed for {}: {}", url, e)
            return False
        return r.status_code < 400

    def print_document(self) -> None:
        self._print_action(self.path)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

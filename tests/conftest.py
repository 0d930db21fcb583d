import asyncio

import pytest

from picklist.compiler import image_sources

BASE_URL = "https://www.discogs.com"
ORDER_1 = f"{BASE_URL}/sell/order/100-1"
ORDER_2 = f"{BASE_URL}/sell/order/100-2"

LISTING_HTML = """
<html><body>
<table class="marketplace-table"><tbody>
<tr id="order100-1">
  <td class="order_number"><a href="/sell/order/100-1">100-1</a></td>
  <td class="order_item_name">
    <img src="https://img.example/blue-thumb.jpg">
    <a href="/release/1-Blue-Album">Blue Album</a>
  </td>
</tr>
<tr id="order100-2">
  <td class="order_number"><a href="/sell/order/100-2">100-2</a></td>
  <td class="order_item_name">
    2 Items:
    <img data-src="https://img.example/blue-thumb.jpg">
    <img src="https://img.example/red-thumb.jpg" data-src="https://img.example/ignored.jpg">
    <a href="/release/1-Blue-Album">Blue Album</a><br>
    <a href="#" onclick="toggle_items(2)">View 1 more item</a>
    <div class="items_hide"><a href="/release/2-Red-Single">Red Single</a></div>
  </td>
</tr>
<tr id="order-broken"><td class="order_item_name">no order link</td></tr>
<tr class="spacer"><td class="order_number"><a href="/sell/order/999">999</a></td></tr>
</tbody></table>
</body></html>
"""

DETAIL_1_HTML = """
<html><body><table class="order_table"><tbody>
<tr><td class="order_item">
  <img src="https://img.example/blue-full.jpg">
  <div class="order-item-info"><a href="/release/1-Blue-Album">Blue Album</a></div>
  <p><strong>Location:</strong> A12
  </p>
</td></tr>
</tbody></table></body></html>
"""

DETAIL_2_HTML = """
<html><body><table class="order_table"><tbody>
<tr><td class="order_item">
  <img src="https://img.example/blue-full.jpg">
  <div class="order-item-info"><a href="/release/1-Blue-Album">Blue Album</a></div>
  <div class="notes">Sleeve: VG+ Location: A12</div>
</td></tr>
<tr><td class="order_item">
  <div class="order-item-info"><a href="/release/2-Red-Single">Red Single</a></div>
  <div class="notes">Sleeve: NM</div>
</td></tr>
<tr><td class="order_item"><div class="order-item-info">No release link</div></td></tr>
</tbody></table></body></html>
"""

DETAIL_PAGES = {ORDER_1: DETAIL_1_HTML, ORDER_2: DETAIL_2_HTML}


class FakeFetcher:
    """Async page fetcher over a dict; unknown URLs fail like an HTTP 404."""

    def __init__(self, pages):
        self.pages = dict(pages)
        self.calls = []
        self.closed = False

    async def __call__(self, url):
        self.calls.append(url)
        await asyncio.sleep(0)
        if url not in self.pages:
            raise RuntimeError(f"HTTP 404 for {url}")
        return self.pages[url]

    async def aclose(self):
        self.closed = True


class FakeSurface:
    """Render surface that settles images in memory and records when print happened."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.html = None
        self.settled = []
        self.prints = 0
        self.settled_at_print = None

    def open(self, html):
        self.html = html
        return image_sources(html)

    async def load_image(self, src):
        await asyncio.sleep(0)
        self.settled.append(src)
        return src not in self.failing

    def print_document(self):
        self.prints += 1
        self.settled_at_print = len(self.settled)


@pytest.fixture
def listing_html():
    return LISTING_HTML


@pytest.fixture
def detail_pages():
    return dict(DETAIL_PAGES)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher(DETAIL_PAGES)


@pytest.fixture
def fake_surface():
    return FakeSurface()


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_surface():
    return FakeSurface

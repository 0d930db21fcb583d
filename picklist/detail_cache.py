from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Tuple

import httpx
from loguru import logger

from .config import (
    FETCH_TIMEOUT_SECONDS,
    HTTP_CONNECT_TIMEOUT,
    HTTP_MAX_BYTES,
    HTTP_MAX_REDIRECTS,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    SESSION_COOKIE,
    DetailItem,
)
from .extract import extract_detail

DetailItems = Tuple[DetailItem, ...]
Fetcher = Callable[[str], Awaitable[str]]


def http_client(session_cookie: str = SESSION_COOKIE) -> httpx.AsyncClient:
    headers = {"User-Agent": HTTP_USER_AGENT}
    if session_cookie:
        headers["Cookie"] = session_cookie
    return httpx.AsyncClient(
        headers=headers,
        follow_redirects=True,
        timeout=httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        max_redirects=HTTP_MAX_REDIRECTS,
    )


class HttpDocumentFetcher:
    """
    GET a page and return its body text.

    Raises RuntimeError for HTTP errors and oversized bodies; callers decide
    whether that is fatal.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client

    async def __call__(self, url: str) -> str:
        if self._client is None:
            self._client = http_client()
        logger.info("Fetching order page: {}", url)
        r = await self._client.get(url)
        if r.status_code >= 400:
            raise RuntimeError(f"HTTP {r.status_code} for {url}")
        if len(r.content) > HTTP_MAX_BYTES:
            raise RuntimeError(f"Page too large ({len(r.content)} bytes) for {url}")
        return r.text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()


class DetailCache:
    """
    Detail address -> parsed DetailItems, memoized for the life of the object.

    get_detail() is single-flight per address: the first caller for a missing
    address starts the load, concurrent callers await the same task, and the
    result (empty on any failure) is stored once and never refreshed.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        base_url: str = "",
    ) -> None:
        self._fetcher: Fetcher = fetcher or HttpDocumentFetcher()
        self._timeout = timeout
        self._base_url = base_url
        self._entries: Dict[str, DetailItems] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self.fetch_count = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: str) -> bool:
        return address in self._entries

    def cached(self, address: str) -> Optional[DetailItems]:
        return self._entries.get(address)

    async def aclose(self) -> None:
        close = getattr(self._fetcher, "aclose", None)
        if close is not None:
            await close()

    async def get_detail(self, address: str) -> DetailItems:
        hit = self._entries.get(address)
        if hit is not None:
            return hit

        task = self._inflight.get(address)
        if task is None:
            task = asyncio.ensure_future(self._load(address))
            self._inflight[address] = task
        # shield: one waiter being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def _load(self, address: str) -> DetailItems:
        self.fetch_count += 1
        try:
            html = await asyncio.wait_for(self._fetcher(address), timeout=self._timeout)
            items: DetailItems = tuple(extract_detail(html, self._base_url))
            logger.info("Parsed {} items from {}", len(items), address)
        except asyncio.TimeoutError:
            logger.warning("Order fetch timed out after {}s: {}", self._timeout, address)
            items = ()
        except Exception as e:
            logger.warning("Failed to fetch order details for {}: {}", address, e)
            items = ()
        self._entries.setdefault(address, items)
        self._inflight.pop(address, None)
        return self._entries[address]

import asyncio

import httpx

from picklist.detail_cache import DetailCache, HttpDocumentFetcher

from conftest import DETAIL_1_HTML, ORDER_1, ORDER_2


def test_hit_does_not_refetch(fake_fetcher):
    async def run():
        cache = DetailCache(fake_fetcher)
        first = await cache.get_detail(ORDER_1)
        second = await cache.get_detail(ORDER_1)
        return cache, first, second

    cache, first, second = asyncio.run(run())
    assert fake_fetcher.calls == [ORDER_1]
    assert first is second
    assert [i.location for i in first] == ["A12"]
    assert ORDER_1 in cache and len(cache) == 1


def test_concurrent_callers_share_one_fetch():
    calls = []

    async def run():
        gate = asyncio.Event()

        async def slow_fetch(url):
            calls.append(url)
            await gate.wait()
            return DETAIL_1_HTML

        cache = DetailCache(slow_fetch)
        waiters = [asyncio.ensure_future(cache.get_detail(ORDER_1)) for _ in range(5)]
        await asyncio.sleep(0)
        gate.set()
        return cache, await asyncio.gather(*waiters)

    cache, results = asyncio.run(run())
    assert calls == [ORDER_1]
    assert cache.fetch_count == 1
    assert all(r is results[0] for r in results)


def test_different_addresses_fetch_independently(fake_fetcher):
    async def run():
        cache = DetailCache(fake_fetcher)
        return await asyncio.gather(cache.get_detail(ORDER_1), cache.get_detail(ORDER_2))

    one, two = asyncio.run(run())
    assert sorted(fake_fetcher.calls) == sorted([ORDER_1, ORDER_2])
    assert len(one) == 1 and len(two) == 2


def test_failure_is_cached_as_empty(make_fetcher):
    fetcher = make_fetcher({})

    async def run():
        cache = DetailCache(fetcher)
        first = await cache.get_detail(ORDER_1)
        second = await cache.get_detail(ORDER_1)
        return cache, first, second

    cache, first, second = asyncio.run(run())
    assert first == () and second == ()
    assert fetcher.calls == [ORDER_1]
    assert cache.cached(ORDER_1) == ()


def test_timeout_resolves_to_empty_and_is_not_retried():
    calls = []

    async def hang(url):
        calls.append(url)
        await asyncio.sleep(10)
        return DETAIL_1_HTML

    async def run():
        cache = DetailCache(hang, timeout=0.01)
        return await cache.get_detail(ORDER_1), await cache.get_detail(ORDER_1)

    first, second = asyncio.run(run())
    assert first == () and second == ()
    assert calls == [ORDER_1]


def test_http_fetcher_reads_body_and_rejects_errors():
    def handler(request):
        if request.url.path.endswith("100-1"):
            return httpx.Response(200, text=DETAIL_1_HTML)
        return httpx.Response(404, text="not found")

    async def run():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = HttpDocumentFetcher(client)
        cache = DetailCache(fetcher)
        try:
            return await cache.get_detail(ORDER_1), await cache.get_detail(ORDER_2)
        finally:
            await fetcher.aclose()

    found, missing = asyncio.run(run())
    assert [i.display_name for i in found] == ["Blue Album"]
    assert missing == ()

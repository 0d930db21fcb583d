# picklist/cli.py
from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path
from typing import Optional

from loguru import logger

from . import config
from .compiler import FileSurface, open_in_browser
from .detail_cache import DetailCache, HttpDocumentFetcher
from .export import write_pick_list_csv
from .logging_setup import setup_logging
from .overview import extract_overview_items, render_overview
from .pipeline import annotate_listing, print_pick_list
from .utils.urls import is_open_orders_url

EXIT_INELIGIBLE = 2


def _is_url(source: str) -> bool:
    return bool(re.match(r"^https?://", source.strip(), re.IGNORECASE))


async def _read_source(source: str, fetcher: HttpDocumentFetcher) -> str:
    if _is_url(source):
        return await fetcher(source)
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def _progress(message: str) -> None:
    logger.info(message)


def _skip_print(path: Path) -> None:
    logger.info("Pick list ready at {} (printing skipped)", path)


async def _run(args: argparse.Namespace) -> int:
    fetcher = HttpDocumentFetcher()
    cache = DetailCache(fetcher, base_url=args.base_url)
    try:
        html = await _read_source(args.input, fetcher)

        if args.command == "overview":
            out = Path(args.out or config.OVERVIEW_PATH)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(render_overview(extract_overview_items(html)), encoding="utf-8")
            logger.info("Location overview written to {}", out)
            return 0

        if args.command == "annotate":
            page = await annotate_listing(html, cache, args.base_url)
            out = Path(args.out or "annotated_orders.html")
            out.write_text(page.html(), encoding="utf-8")
            logger.info("Annotated listing written to {} ({} badges)", out, page.badge_count())
            return 0

        surface = FileSurface(
            Path(args.out or config.PICK_LIST_PATH),
            args.base_url,
            print_action=_skip_print if args.no_print else open_in_browser,
        )
        try:
            document = await print_pick_list(html, cache, surface, args.base_url, _progress)
        finally:
            await surface.aclose()
        if args.csv:
            write_pick_list_csv(document.orders, Path(args.csv))
        return 0
    finally:
        await fetcher.aclose()


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Seller order pick lists and location badges")
    ap.add_argument("command", choices=["annotate", "compile", "overview"])
    ap.add_argument("--input", required=True, help="Listing/detail page: a saved HTML file or a URL")
    ap.add_argument("--base-url", default=config.MARKETPLACE_BASE_URL)
    ap.add_argument("--out", default=None, help="Output HTML path")
    ap.add_argument("--csv", default=None, help="Also export the pick list as CSV (compile only)")
    ap.add_argument("--no-print", action="store_true", help="Write the pick list without opening it")
    ap.add_argument("--log-level", default=config.LOG_LEVEL)
    args = ap.parse_args(argv)

    setup_logging(args.log_level)

    if args.command != "overview" and _is_url(args.input) and not is_open_orders_url(args.input):
        logger.warning("Not an open-orders listing page, refusing: {}", args.input)
        return EXIT_INELIGIBLE

    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())

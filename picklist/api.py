from __future__ import annotations

"""
FastAPI application for the pick-list pipeline.

- POST /annotate  listing HTML -> listing HTML with location badges
- POST /picklist  listing HTML -> rendered pick list (printing is the client's job)
- POST /overview  detail HTML  -> location overview grid
- One DetailCache per process, so repeated calls never refetch an order
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from .compiler import render_pick_list
from .config import MARKETPLACE_BASE_URL, HealthResponse
from .detail_cache import DetailCache
from .logging_setup import setup_logging
from .overview import extract_overview_items, render_overview
from .pipeline import annotate_listing, pick_list_orders


class PageRequest(BaseModel):
    html: str = Field(..., min_length=1)
    base_url: str = MARKETPLACE_BASE_URL


class AnnotateResponse(BaseModel):
    html: str
    badges: int


class PickListResponse(BaseModel):
    html: str
    orders: int
    items: int


class OverviewResponse(BaseModel):
    html: str
    items: int


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_detail_cache: DetailCache | None = None


def get_detail_cache() -> DetailCache:
    global _detail_cache
    if _detail_cache is None:
        _detail_cache = DetailCache(base_url=MARKETPLACE_BASE_URL)
    return _detail_cache


@app.on_event("startup")
def startup_event() -> None:
    setup_logging()
    get_detail_cache()
    logger.info("Detail cache ready.")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    global _detail_cache
    if _detail_cache is not None:
        await _detail_cache.aclose()
        _detail_cache = None
    logger.info("Detail cache closed.")


def _require_html(req: PageRequest) -> str:
    if not req.html.strip():
        raise HTTPException(status_code=422, detail="html must be non-empty")
    return req.html


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/annotate", response_model=AnnotateResponse)
async def annotate_page(req: PageRequest) -> AnnotateResponse:
    html = _require_html(req)
    page = await annotate_listing(html, get_detail_cache(), req.base_url)
    return AnnotateResponse(html=page.html(), badges=page.badge_count())


@app.post("/picklist", response_model=PickListResponse)
async def pick_list(req: PageRequest) -> PickListResponse:
    html = _require_html(req)
    orders = await pick_list_orders(html, get_detail_cache(), req.base_url)
    return PickListResponse(
        html=render_pick_list(orders),
        orders=len(orders),
        items=sum(o.item_count for o in orders),
    )


@app.post("/overview", response_model=OverviewResponse)
def overview(req: PageRequest) -> OverviewResponse:
    items = extract_overview_items(_require_html(req))
    return OverviewResponse(html=render_overview(items), items=len(items))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

# picklist/utils/urls.py
from __future__ import annotations
from urllib.parse import parse_qs, urljoin, urlparse

from .. import config

__all__ = ["absolute_url", "is_open_orders_url"]


def absolute_url(base: str, href: str) -> str:
    """
    Resolve `href` against `base`; returns `href` untouched when no base is given
    or it is already absolute.
    """
    href = (href or "").strip()
    if not href:
        return ""
    if not base:
        return href
    return urljoin(base, href)


def is_open_orders_url(url: str) -> bool:
    """
    True for seller order listing pages the pick list can run on.

    Shipped and archived listings are excluded:
    - https://www.discogs.com/sell/orders                 -> True
    - https://www.discogs.com/sell/orders?status=Shipped  -> False
    - https://www.discogs.com/sell/orders?status=Shipped+Partially -> False
    - https://www.discogs.com/sell/orders?archived=Y      -> False
    """
    if not url:
        return False
    p = urlparse(str(url).strip())
    if p.path.rstrip("/") != config.LISTING_PATH:
        return False
    query = parse_qs(p.query)
    for key, value in config.EXCLUDED_LISTING_FILTERS.items():
        if any(v.startswith(value) for v in query.get(key, [])):
            return False
    return True

from __future__ import annotations

"""
Storage-location recovery for one item fragment of an order detail page.

Detail pages mark the location inconsistently: sometimes as
``<strong>Location:</strong> A12`` inside a note paragraph, sometimes as
plain text somewhere in the row. Two rules are applied in order:

* strict: a ``strong`` whose text contains "Location:" -> the rest of the
  line in its parent element's text
* loose: "Location:" followed by an alphanumeric token anywhere in the
  fragment's flattened text
"""

from bs4 import Tag

from .config import LOCATION_LINE_RE, LOCATION_MARKER, LOCATION_TOKEN_RE


def _location_from_markup(fragment: Tag) -> str:
    for strong in fragment.find_all("strong"):
        if LOCATION_MARKER not in strong.get_text():
            continue
        parent = strong.parent
        if parent is None:
            continue
        m = LOCATION_LINE_RE.search(parent.get_text())
        if m:
            value = m.group(1).strip()
            if value:
                return value
    return ""


def _location_from_text(fragment: Tag) -> str:
    m = LOCATION_TOKEN_RE.search(fragment.get_text())
    return m.group(1).strip() if m else ""


def resolve_location(fragment: Tag | None) -> str:
    """Return the item's location code, or "" when neither rule matches."""
    if fragment is None:
        return ""
    return _location_from_markup(fragment) or _location_from_text(fragment)

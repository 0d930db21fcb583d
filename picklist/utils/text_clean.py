# picklist/utils/text_clean.py
from __future__ import annotations
import re


def clean_text(text: str | None) -> str:
    """
    Collapse runs of whitespace/newlines into single spaces and trim.
    Used for link text so listing and detail names compare equal.
    """
    text = "" if text is None else str(text)
    return re.sub(r"\s+", " ", text).strip()


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"

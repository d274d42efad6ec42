"""ZR section citations and their zr.planning.nyc.gov URLs."""

from __future__ import annotations

import re

ZR_BASE_URL = "https://zr.planning.nyc.gov"

_ROMAN = {1: "i", 2: "ii", 3: "iii", 4: "iv", 5: "v", 6: "vi", 7: "vii",
          8: "viii", 9: "ix", 10: "x", 11: "xi", 12: "xii", 13: "xiii", 14: "xiv"}

_SECTION_RE = re.compile(r"^(\d)(\d)-(\d+)")


def zr_section(section: str) -> str:
    """'23-22' -> 'ZR §23-22'."""
    return f"ZR §{section}"


def zr_url(section: str) -> str | None:
    """URL of a ZR section: '23-362(a)' -> .../article-ii/chapter-3/23-362."""
    match = _SECTION_RE.match(section)
    if not match:
        return None
    article, chapter, number = int(match.group(1)), match.group(2), match.group(3)
    return f"{ZR_BASE_URL}/article-{_ROMAN[article]}/chapter-{chapter}/{article}{chapter}-{number}"


def cite(section: str) -> dict:
    """Keyword arguments for a result's citation fields."""
    return {"source_section": zr_section(section), "source_url": zr_url(section)}

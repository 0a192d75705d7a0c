"""Classify a shop URL as homepage, category, filter, product or other.

Patterns follow the shop's URL conventions: filter pages carry attribute
segments (/kleur/, /merk/, ranges like 40---to--50-cm), product slugs are
long and end in specs or dimensions.
"""

import re
from urllib.parse import urlparse

from models import PageType

FILTER_PATTERNS = (
    re.compile(r"/filter/", re.I),
    re.compile(r"/radiator-breedte-reeks/", re.I),
    re.compile(r"/radiator-hoogte-reeks/", re.I),
    re.compile(r"/kleur/", re.I),
    re.compile(r"/merk/", re.I),
    re.compile(r"/afmeting/", re.I),
    re.compile(r"/materiaal/", re.I),
    re.compile(r"---to--", re.I),
)

PRODUCT_PATTERNS = (
    re.compile(r"\d+x\d+", re.I),
    re.compile(r"-cm$", re.I),
    re.compile(r"-mm$", re.I),
    re.compile(r"-wit$", re.I),
    re.compile(r"-zwart$", re.I),
    re.compile(r"-grijs$", re.I),
    re.compile(r"-liter$", re.I),
    re.compile(r"-watt$", re.I),
)

PRODUCT_SLUG_MIN_LENGTH = 30
PRODUCT_MIN_HYPHENS = 5
CATEGORY_MAX_SEGMENTS = 4


def _matches_any(patterns: tuple[re.Pattern, ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def detect_page_type(url: str) -> PageType:
    """Best-effort page type from the URL path alone. Never raises."""
    if not isinstance(url, str) or not url.strip():
        return "other"
    try:
        path = urlparse(url.strip()).path
    except ValueError:
        return "other"

    if path in {"", "/"}:
        return "homepage"

    if _matches_any(FILTER_PATTERNS, path):
        return "filter"

    segments = [segment for segment in path.split("/") if segment]
    last_segment = segments[-1] if segments else ""

    if len(last_segment) > PRODUCT_SLUG_MIN_LENGTH and _matches_any(PRODUCT_PATTERNS, last_segment):
        return "product"

    if "-" in last_segment and (
        re.search(r"\d{2,}", last_segment) or _matches_any(PRODUCT_PATTERNS, last_segment)
    ):
        if last_segment.count("-") >= PRODUCT_MIN_HYPHENS:
            return "product"

    if 1 <= len(segments) <= CATEGORY_MAX_SEGMENTS and not _matches_any(PRODUCT_PATTERNS, path):
        return "category"

    return "other"

"""Quick scan: deterministic SEO scoring from scraped page signals.

No AI, no network. Score starts at 100 and every detected problem subtracts
a fixed penalty, so each point lost maps to one concrete fix. Input is
tolerated in any shape; garbage degrades into a worse score and explanatory
issues instead of an exception.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import NamedTuple

from models import Issue, PageType, PageTypeRequirements, Priority, ScanMetrics, ScoreResult, Severity

PAGE_TYPES: tuple[PageType, ...] = ("homepage", "category", "filter", "product", "other")

TITLE_MIN_LENGTH = 50
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 150
DESCRIPTION_MAX_LENGTH = 160
LONG_CONTENT_FACTOR = 1.5

# Suffixes that leak into titles when they are copied from another site.
BRANDING_MARKERS: tuple[str, ...] = ("- YouTube",)

_DEFAULT_REQUIREMENTS: Mapping[str, Mapping[str, object]] = MappingProxyType(
    {
        "homepage": MappingProxyType(
            {
                "min_word_count": 300,
                "max_word_count": 800,
                "required_schema_types": ("Organization",),
                "recommended_schema_types": ("WebSite",),
                "min_content_links": 10,
                "requires_faq": False,
            }
        ),
        "category": MappingProxyType(
            {
                "min_word_count": 700,
                "max_word_count": 1000,
                "required_schema_types": ("BreadcrumbList",),
                "recommended_schema_types": ("FAQPage",),
                "min_content_links": 5,
                "requires_faq": True,
            }
        ),
        "filter": MappingProxyType(
            {
                "min_word_count": 200,
                "max_word_count": 400,
                "required_schema_types": ("BreadcrumbList",),
                "recommended_schema_types": (),
                "min_content_links": 3,
                "requires_faq": False,
            }
        ),
        "product": MappingProxyType(
            {
                "min_word_count": 150,
                "max_word_count": 300,
                "required_schema_types": ("Product", "Offer"),
                "recommended_schema_types": ("BreadcrumbList",),
                "min_content_links": 2,
                "requires_faq": False,
            }
        ),
        "other": MappingProxyType(
            {
                "min_word_count": 300,
                "max_word_count": 800,
                "required_schema_types": (),
                "recommended_schema_types": (),
                "min_content_links": 3,
                "requires_faq": False,
            }
        ),
    }
)

_PAGE_TYPE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "homepage": "Homepage",
        "category": "Category page",
        "filter": "Filter page",
        "product": "Product page",
        "other": "Other",
    }
)


class AltTextTier(NamedTuple):
    applies: Callable[[int], bool]
    severity: Severity
    priority: Priority
    penalty: int


# First match wins, so order from most to least severe.
IMAGE_ALT_TIERS: tuple[AltTextTier, ...] = (
    AltTextTier(lambda count: count > 10, "error", "high", 10),
    AltTextTier(lambda count: count > 3, "warning", "medium", 5),
    AltTextTier(lambda count: count > 0, "info", "low", 2),
)


def normalize_page_type(value: object) -> PageType:
    """Return a known page type, falling back to "other"."""
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in PAGE_TYPES:
            return cleaned  # type: ignore[return-value]
    return "other"


def default_requirements(page_type: object) -> PageTypeRequirements:
    """Return a fresh copy of the default requirements for `page_type`."""
    base = _DEFAULT_REQUIREMENTS[normalize_page_type(page_type)]
    return {
        "min_word_count": base["min_word_count"],
        "max_word_count": base["max_word_count"],
        "required_schema_types": list(base["required_schema_types"]),
        "recommended_schema_types": list(base["recommended_schema_types"]),
        "min_content_links": base["min_content_links"],
        "requires_faq": base["requires_faq"],
    }


def page_type_label(page_type: object) -> str:
    return _PAGE_TYPE_LABELS[normalize_page_type(page_type)]


def _count(value: object) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        if isinstance(value, str):
            # "12.0" and 12.0 must count the same
            value = float(value.strip())
        return max(0, int(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _description(value: object) -> str | None:
    """Only None and "" are missing; whitespace is scored as a (too short) description."""
    if isinstance(value, str) and value:
        return value
    return None


def _schema_types(value: object) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def resolve_requirements(page_type: PageType, override: object = None) -> PageTypeRequirements:
    """Merge a (possibly partial) caller override onto the page type defaults."""
    requirements = default_requirements(page_type)
    if not isinstance(override, Mapping):
        return requirements

    for key in ("min_word_count", "max_word_count", "min_content_links"):
        if key in override and override[key] is not None:
            requirements[key] = _count(override[key])
    for key in ("required_schema_types", "recommended_schema_types"):
        if key in override and override[key] is not None:
            requirements[key] = _schema_types(override[key])
    if isinstance(override.get("requires_faq"), bool):
        requirements["requires_faq"] = override["requires_faq"]
    return requirements


def _empty_metrics() -> ScanMetrics:
    return {
        "title_length": 0,
        "title_valid": False,
        "description_length": 0,
        "description_valid": False,
        "description_missing": True,
        "h1_count": 0,
        "h1_valid": False,
        "word_count": 0,
        "word_count_valid": False,
        "images_without_alt": 0,
        "schema_types_count": 0,
        "internal_links_count": 0,
        "content_links_count": 0,
    }


def fallback_result() -> ScoreResult:
    """Result returned when the input is not a signal at all."""
    return {
        "score": 0,
        "page_type": "other",
        "issues": [
            {
                "severity": "error",
                "category": "Analysis",
                "message": "Analysis could not be completed: no usable page data.",
                "priority": "high",
            }
        ],
        "metrics": _empty_metrics(),
        "requirements": default_requirements("other"),
    }


def compute_quick_scan(signal: object, requirements: object = None) -> ScoreResult:
    """
    Score a scraped page signal against its page type requirements.
    Never raises; non-mapping input yields `fallback_result()`.
    """
    if not isinstance(signal, Mapping):
        return fallback_result()

    title = _text(signal.get("title"))
    description = _description(signal.get("description"))
    word_count = _count(signal.get("word_count"))
    headings = signal.get("heading_counts")
    h1_count = _count(headings.get("h1")) if isinstance(headings, Mapping) else 0
    internal_links = _count(signal.get("internal_link_count"))
    content_links = _count(signal.get("content_link_count"))
    images_without_alt = _count(signal.get("images_without_alt_count"))
    schema_types = _schema_types(signal.get("schema_org_types"))
    page_type = normalize_page_type(signal.get("page_type"))
    reqs = resolve_requirements(page_type, requirements)

    issues: list[Issue] = []
    score = 100

    def flag(severity: Severity, category: str, message: str, priority: Priority, penalty: int) -> None:
        nonlocal score
        issues.append({"severity": severity, "category": category, "message": message, "priority": priority})
        score -= penalty

    # Title
    title_length = len(title)
    if title_length == 0:
        flag("error", "Meta", "Title tag missing", "high", 15)
    elif title_length < TITLE_MIN_LENGTH:
        flag(
            "warning",
            "Meta",
            f"Title too short ({title_length} characters, recommended: {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH})",
            "medium",
            5,
        )
    elif title_length > TITLE_MAX_LENGTH:
        flag("warning", "Meta", f"Title too long ({title_length} characters, max: {TITLE_MAX_LENGTH})", "medium", 5)

    for marker in BRANDING_MARKERS:
        if marker in title:
            flag("error", "Branding", f'Title contains "{marker}" (copy-paste artifact)', "high", 15)
            break

    # Meta description
    description_length = len(description) if description is not None else 0
    if description is None:
        flag("error", "Meta", "Meta description missing", "high", 15)
    elif description_length < DESCRIPTION_MIN_LENGTH:
        flag("warning", "Meta", f"Meta description too short ({description_length} characters)", "medium", 5)
    elif description_length > DESCRIPTION_MAX_LENGTH:
        flag("warning", "Meta", f"Meta description too long ({description_length} characters)", "low", 3)

    # Headings
    if h1_count == 0:
        flag("error", "Headings", "H1 missing", "high", 10)
    elif h1_count > 1:
        flag("warning", "Headings", f"Multiple H1 tags found ({h1_count})", "medium", 5)

    # Content length, page type specific
    if word_count < reqs["min_word_count"]:
        flag(
            "warning",
            "Content",
            f"Too few words for a {page_type} page ({word_count}, min: {reqs['min_word_count']})",
            "medium",
            10,
        )
    elif word_count > reqs["max_word_count"] * LONG_CONTENT_FACTOR:
        flag("info", "Content", f"A lot of content ({word_count} words), check that all of it is relevant", "low", 0)

    # Images
    for tier in IMAGE_ALT_TIERS:
        if tier.applies(images_without_alt):
            flag(tier.severity, "Images", f"{images_without_alt} images without alt text", tier.priority, tier.penalty)
            break

    # Structured data; both checks may fire for the same page
    present = {item.lower() for item in schema_types}
    required = reqs["required_schema_types"]
    if required and not all(item.lower() in present for item in required):
        flag("warning", "Schema", f"Missing required schema: {', '.join(required)}", "medium", 8)
    if not schema_types:
        flag("info", "Schema", "No structured data found", "low", 3)

    # Internal linking
    if content_links < reqs["min_content_links"]:
        flag(
            "warning",
            "Links",
            f"Too few content links ({content_links}, recommended: {reqs['min_content_links']}+)",
            "medium",
            5,
        )

    metrics: ScanMetrics = {
        "title_length": title_length,
        "title_valid": TITLE_MIN_LENGTH <= title_length <= TITLE_MAX_LENGTH,
        "description_length": description_length,
        "description_valid": DESCRIPTION_MIN_LENGTH <= description_length <= DESCRIPTION_MAX_LENGTH,
        "description_missing": description is None,
        "h1_count": h1_count,
        "h1_valid": h1_count == 1,
        "word_count": word_count,
        "word_count_valid": word_count >= reqs["min_word_count"],
        "images_without_alt": images_without_alt,
        "schema_types_count": len(schema_types),
        "internal_links_count": internal_links,
        "content_links_count": content_links,
    }

    return {
        "score": max(0, min(100, score)),
        "page_type": page_type,
        "issues": issues,
        "metrics": metrics,
        "requirements": reqs,
    }

"""Data models and types used across the backend.

Database table definitions are in database.py.
Types for the scraper, the quick scan and rank tracking live here.
"""

from typing import Literal, TypedDict

PageType = Literal["homepage", "category", "filter", "product", "other"]
Severity = Literal["error", "warning", "info"]
Priority = Literal["high", "medium", "low"]


class HeadingCounts(TypedDict):
    h1: int
    h2: int
    h3: int
    h4: int
    h5: int
    h6: int


class PageTypeRequirements(TypedDict):
    """Expected ranges for a page type."""

    min_word_count: int
    max_word_count: int
    required_schema_types: list[str]
    recommended_schema_types: list[str]
    min_content_links: int
    requires_faq: bool


class ScrapedPageSignal(TypedDict, total=False):
    """Scorer input. Every key is optional."""

    title: str
    description: str | None
    word_count: int
    heading_counts: HeadingCounts
    internal_link_count: int
    content_link_count: int
    images_without_alt_count: int
    schema_org_types: list[str]
    page_type: PageType


class Issue(TypedDict):
    severity: Severity
    category: str
    message: str
    priority: Priority


class ScanMetrics(TypedDict):
    title_length: int
    title_valid: bool
    description_length: int
    description_valid: bool
    description_missing: bool
    h1_count: int
    h1_valid: bool
    word_count: int
    word_count_valid: bool
    images_without_alt: int
    schema_types_count: int
    internal_links_count: int
    content_links_count: int


class ScoreResult(TypedDict):
    """Structured output of the quick scan."""

    score: int
    page_type: PageType
    issues: list[Issue]
    metrics: ScanMetrics
    requirements: PageTypeRequirements


class LinkAnalysis(TypedDict):
    total: int
    internal: int
    external: int
    footer_links: int
    abc_index_links: int
    content_links: int


class ContentMetrics(TypedDict):
    word_count: int
    paragraph_count: int
    avg_paragraph_length: int
    sentence_count: int
    avg_sentence_length: int
    heading_counts: HeadingCounts
    h1_text: str | None


class ImageIssue(TypedDict):
    src: str
    alt: str | None
    issue: Literal["missing", "generic"]


class ScrapedPage(TypedDict):
    """Structured output from the page scraper."""

    url: str
    title: str
    title_source: str
    description: str | None
    description_source: str
    link_analysis: LinkAnalysis
    content_metrics: ContentMetrics
    image_issues: list[ImageIssue]
    schema_types: list[str]
    page_type: PageType
    requirements: PageTypeRequirements
    http_status: int
    response_time_ms: int
    fetch_error: str


class SitemapUrl(TypedDict):
    url: str
    path: str
    suggested_anchor: str


class RankCheckResult(TypedDict):
    keyword: str
    position: int | None
    url: str | None
    title: str | None
    snippet: str | None
    found: bool


class PositionChange(TypedDict):
    direction: Literal["up", "down", "same", "new", "lost"]
    change: int

"""Pydantic schemas for API request/response."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

PageTypeName = Literal["homepage", "category", "filter", "product", "other"]


class QuickScanRequest(BaseModel):
    """Request body for POST /quick-scan."""

    url: str

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, value: object) -> str:
        normalized = str(value or "").strip()
        if not normalized:
            raise ValueError("URL is required")
        return normalized


class HeadingCountsModel(BaseModel):
    h1: int = 0
    h2: int = 0
    h3: int = 0
    h4: int = 0
    h5: int = 0
    h6: int = 0


class RequirementsModel(BaseModel):
    """Page type requirements; unset fields fall back to the page type default."""

    min_word_count: int | None = None
    max_word_count: int | None = None
    required_schema_types: list[str] | None = None
    recommended_schema_types: list[str] | None = None
    min_content_links: int | None = None
    requires_faq: bool | None = None


class ScoreRequest(BaseModel):
    """Request body for POST /score. The signal is passed through loosely; the scorer defaults bad values."""

    signal: dict[str, Any] = Field(default_factory=dict)
    requirements: RequirementsModel | None = None


class IssueModel(BaseModel):
    severity: Literal["error", "warning", "info"]
    category: str
    message: str
    priority: Literal["high", "medium", "low"]


class MetricsModel(BaseModel):
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


class PageTypeRequirementsModel(BaseModel):
    min_word_count: int
    max_word_count: int
    required_schema_types: list[str]
    recommended_schema_types: list[str]
    min_content_links: int
    requires_faq: bool


class ScoreResponse(BaseModel):
    score: int
    page_type: PageTypeName
    page_type_label: str
    issues: list[IssueModel]
    metrics: MetricsModel
    requirements: PageTypeRequirementsModel


class QuickScanResponse(BaseModel):
    """Response for POST /quick-scan."""

    audit_id: int
    url: str
    title: str
    description: str | None
    result: ScoreResponse


class AuditResponse(BaseModel):
    """Stored audit snapshot."""

    id: int
    url: str
    page_type: PageTypeName
    score: int
    is_quick_scan: bool
    issues: list[IssueModel]
    metrics: dict[str, Any]
    requirements: dict[str, Any]
    created_at: str


class KeywordCreateRequest(BaseModel):
    keyword: str
    target_domain: str
    category: str | None = None

    @field_validator("keyword", "target_domain", mode="before")
    @classmethod
    def require_text(cls, value: object) -> str:
        normalized = str(value or "").strip()
        if not normalized:
            raise ValueError("Field is required")
        return normalized

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: object) -> str | None:
        normalized = str(value or "").strip()
        return normalized or None


class KeywordDomainUpdateRequest(BaseModel):
    target_domain: str

    @field_validator("target_domain", mode="before")
    @classmethod
    def require_text(cls, value: object) -> str:
        normalized = str(value or "").strip()
        if not normalized:
            raise ValueError("Target domain is required")
        return normalized


class PositionChangeModel(BaseModel):
    direction: Literal["up", "down", "same", "new", "lost"]
    change: int


class KeywordResponse(BaseModel):
    id: int
    keyword: str
    target_domain: str
    category: str | None
    is_tracking: bool
    position: int | None
    previous_position: int | None
    last_checked: str | None
    created_at: str
    position_change: PositionChangeModel


class RankCheckResultModel(BaseModel):
    keyword: str
    position: int | None
    url: str | None
    title: str | None
    snippet: str | None
    found: bool


class RankHistoryItem(BaseModel):
    id: int
    keyword_id: int
    position: int | None
    url: str | None
    title: str | None
    snippet: str | None
    location: str | None
    device: str | None
    checked_at: str


class BatchCheckItem(BaseModel):
    id: int | None
    keyword: str
    result: RankCheckResultModel | None
    error: str | None


class BatchCheckResponse(BaseModel):
    success: int
    failed: int
    outcomes: list[BatchCheckItem]


class SitemapUrlModel(BaseModel):
    url: str
    path: str
    suggested_anchor: str


class SitemapResponse(BaseModel):
    success: bool
    urls: list[SitemapUrlModel]
    total: int
    error: str | None = None

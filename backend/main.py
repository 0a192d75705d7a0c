"""PageScore API – FastAPI app for quick scans, audit history and rank tracking."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
import rank_tracking
from database import (
    delete_keyword,
    get_audit,
    get_keyword,
    init_db,
    insert_audit,
    insert_keyword,
    list_audits,
    list_rank_history,
    list_tracked_keywords,
    record_rank_check,
    update_keyword_domain,
)
from logging_config import get_logger
from models import ScoreResult
from quick_scan import compute_quick_scan, page_type_label
from schemas import (
    AuditResponse,
    BatchCheckResponse,
    KeywordCreateRequest,
    KeywordDomainUpdateRequest,
    KeywordResponse,
    QuickScanRequest,
    QuickScanResponse,
    RankCheckResultModel,
    RankHistoryItem,
    ScoreRequest,
    ScoreResponse,
    SitemapResponse,
)
from scraper import scrape_page, to_signal
from sitemap import fetch_sitemap

log = get_logger(__name__)

app = FastAPI(
    title="PageScore API",
    description="Page-type-aware SEO quick scans and keyword rank tracking",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup() -> None:
    init_db()


def _score_response(result: ScoreResult) -> ScoreResponse:
    return ScoreResponse(page_type_label=page_type_label(result["page_type"]), **result)


def _keyword_response(row: dict) -> KeywordResponse:
    change = rank_tracking.position_change(row["position"], row["previous_position"])
    return KeywordResponse(position_change=change, **row)


@app.post("/quick-scan", response_model=QuickScanResponse)
def quick_scan(body: QuickScanRequest) -> QuickScanResponse:
    """
    Pipeline: scrape page -> extract signals -> heuristic score -> store snapshot.
    """
    scraped = scrape_page(body.url)
    if scraped["fetch_error"]:
        raise HTTPException(status_code=502, detail=f"Could not fetch page: {scraped['fetch_error']}")

    result = compute_quick_scan(to_signal(scraped))
    audit_id = insert_audit(url=scraped["url"], result=result, is_quick_scan=True)
    log.info("Quick scan stored: audit_id=%d url=%s score=%d", audit_id, scraped["url"], result["score"])

    return QuickScanResponse(
        audit_id=audit_id,
        url=scraped["url"],
        title=scraped["title"],
        description=scraped["description"],
        result=_score_response(result),
    )


@app.post("/score", response_model=ScoreResponse)
def score_signal(body: ScoreRequest) -> ScoreResponse:
    """Score an already scraped signal. No network, nothing stored."""
    requirements = body.requirements.model_dump(exclude_none=True) if body.requirements else None
    return _score_response(compute_quick_scan(body.signal, requirements))


@app.get("/audits", response_model=list[AuditResponse])
def get_audits(limit: int = 20, url: str | None = None) -> list[AuditResponse]:
    """Return recent audit snapshots for the history view."""
    return [AuditResponse(**row) for row in list_audits(limit=limit, url=url)]


@app.get("/audits/{audit_id}", response_model=AuditResponse)
def get_audit_snapshot(audit_id: int) -> AuditResponse:
    row = get_audit(audit_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Audit not found")
    return AuditResponse(**row)


@app.get("/keywords", response_model=list[KeywordResponse])
def get_keywords() -> list[KeywordResponse]:
    return [_keyword_response(row) for row in list_tracked_keywords()]


@app.post("/keywords", response_model=KeywordResponse, status_code=201)
def add_keyword(body: KeywordCreateRequest) -> KeywordResponse:
    keyword_id = insert_keyword(body.keyword, body.target_domain, body.category)
    return _keyword_response(get_keyword(keyword_id))


@app.patch("/keywords/{keyword_id}", response_model=KeywordResponse)
def change_keyword_domain(keyword_id: int, body: KeywordDomainUpdateRequest) -> KeywordResponse:
    if not update_keyword_domain(keyword_id, body.target_domain):
        raise HTTPException(status_code=404, detail="Keyword not found")
    return _keyword_response(get_keyword(keyword_id))


@app.delete("/keywords/{keyword_id}", status_code=204)
def remove_keyword(keyword_id: int) -> None:
    if not delete_keyword(keyword_id):
        raise HTTPException(status_code=404, detail="Keyword not found")


@app.get("/keywords/{keyword_id}/history", response_model=list[RankHistoryItem])
def get_keyword_history(keyword_id: int, limit: int = 30) -> list[RankHistoryItem]:
    if get_keyword(keyword_id) is None:
        raise HTTPException(status_code=404, detail="Keyword not found")
    return [RankHistoryItem(**row) for row in list_rank_history(keyword_id, limit=limit)]


@app.post("/keywords/{keyword_id}/check", response_model=RankCheckResultModel)
def check_keyword(keyword_id: int) -> RankCheckResultModel:
    """Check the current Google position of one tracked keyword."""
    row = get_keyword(keyword_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Keyword not found")

    try:
        result = rank_tracking.check_keyword_ranking(
            row["keyword"],
            row["target_domain"],
            location=config.RANK_CHECK_LOCATION,
            device=config.RANK_CHECK_DEVICE,
        )
    except rank_tracking.RankCheckError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    record_rank_check(keyword_id, result, location=config.RANK_CHECK_LOCATION, device=config.RANK_CHECK_DEVICE)
    return RankCheckResultModel(**result)


@app.post("/keywords/check-all", response_model=BatchCheckResponse)
def check_all_keywords() -> BatchCheckResponse:
    """Check every tracked keyword sequentially, pausing between calls."""
    tracked = list_tracked_keywords()
    batch = rank_tracking.batch_check_rankings(
        [{"id": row["id"], "keyword": row["keyword"], "target_domain": row["target_domain"]} for row in tracked],
        on_progress=lambda done, total, keyword: log.info("Rank check %d/%d: %s", done + 1, total, keyword),
    )

    for outcome in batch["outcomes"]:
        if outcome["result"] is not None:
            record_rank_check(
                outcome["id"],
                outcome["result"],
                location=config.RANK_CHECK_LOCATION,
                device=config.RANK_CHECK_DEVICE,
            )

    return BatchCheckResponse(success=batch["success"], failed=batch["failed"], outcomes=batch["outcomes"])


@app.get("/sitemap", response_model=SitemapResponse)
def get_sitemap(domain: str, search: str | None = None, limit: int = config.SITEMAP_DEFAULT_LIMIT) -> SitemapResponse:
    """Sitemap URLs with suggested anchors, for picking internal links."""
    if not domain.strip():
        raise HTTPException(status_code=400, detail="Domain is required")
    if limit < 1:
        raise HTTPException(status_code=400, detail="Limit must be at least 1")
    return SitemapResponse(**fetch_sitemap(domain, search=search, limit=limit))


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}

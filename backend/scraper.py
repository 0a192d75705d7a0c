"""Page scraper: fetch a URL and extract the signals the quick scan needs.

Extracts metadata (with source tracking), heading structure, content
metrics, a link profile that separates content links from footer and
ABC-index navigation, images with missing or generic alt text, and JSON-LD
schema types. Does NOT crawl subpages.
"""

import json
import re
import time
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from config import SCRAPE_TIMEOUT_SECONDS
from logging_config import get_logger
from models import ContentMetrics, ImageIssue, LinkAnalysis, ScrapedPage, ScrapedPageSignal
from page_types import detect_page_type
from quick_scan import default_requirements

log = get_logger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "nl-NL,nl;q=0.9,en-US;q=0.8,en;q=0.7",
    "Cache-Control": "no-cache",
}

FOOTER_SELECTORS = ", ".join(
    [
        "footer a[href]",
        ".footer a[href]",
        "#footer a[href]",
        ".site-footer a[href]",
        "#site-footer a[href]",
        ".foot-nav a[href]",
        '[class*="footer"] a[href]',
        '[id*="footer"] a[href]',
    ]
)

ABC_INDEX_SELECTORS = ", ".join(
    [
        ".alphabet a[href]",
        "#alphabet a[href]",
        ".abc-index a[href]",
        ".a-z-index a[href]",
        ".sitemap-alpha a[href]",
        ".letter-nav a[href]",
        ".brands-list a[href]",
        ".brand-list a[href]",
        ".merken-list a[href]",
        ".brand-index a[href]",
        '[class*="alphabet"] a[href]',
        '[class*="brands"] a[href]',
        "nav.alphabet a[href]",
        "nav.brand a[href]",
        "ul.alphabet a[href]",
        "ul.sitemap a[href]",
        "ul.brand-index a[href]",
    ]
)

GENERIC_ALT_PATTERNS = (
    re.compile(r"^image$", re.I),
    re.compile(r"^photo$", re.I),
    re.compile(r"^picture$", re.I),
    re.compile(r"^img$", re.I),
    re.compile(r"^afbeelding$", re.I),
    re.compile(r"^foto$", re.I),
    re.compile(r"^\d+$"),
    re.compile(r"^untitled$", re.I),
    re.compile(r"^placeholder$", re.I),
    re.compile(r"^dsc\d+$", re.I),
    re.compile(r"^img_?\d+$", re.I),
)

_LAZY_SRC_ATTRIBUTES = ("src", "data-src", "data-lazy-src", "data-original", "data-lazy")
_SKIPPED_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "#")


def normalize_url(url: str) -> str:
    formatted = str(url or "").strip()
    if formatted and not formatted.lower().startswith(("http://", "https://")):
        formatted = f"https://{formatted}"
    return formatted


def _empty_heading_counts() -> dict:
    return {"h1": 0, "h2": 0, "h3": 0, "h4": 0, "h5": 0, "h6": 0}


def safe_default(url: str, http_status: int = 0, response_time_ms: int = 0, error: str = "") -> ScrapedPage:
    page_type = detect_page_type(url)
    return {
        "url": url,
        "title": "",
        "title_source": "none",
        "description": None,
        "description_source": "none",
        "link_analysis": {
            "total": 0,
            "internal": 0,
            "external": 0,
            "footer_links": 0,
            "abc_index_links": 0,
            "content_links": 0,
        },
        "content_metrics": {
            "word_count": 0,
            "paragraph_count": 0,
            "avg_paragraph_length": 0,
            "sentence_count": 0,
            "avg_sentence_length": 0,
            "heading_counts": _empty_heading_counts(),
            "h1_text": None,
        },
        "image_issues": [],
        "schema_types": [],
        "page_type": page_type,
        "requirements": default_requirements(page_type),
        "http_status": http_status,
        "response_time_ms": response_time_ms,
        "fetch_error": error,
    }


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return (tag["content"] or "").strip()
    return ""


def extract_metadata(soup: BeautifulSoup) -> tuple[str, str, str | None, str]:
    """
    Title: <title> -> og:title. Description: meta name -> og:description.
    The description is None when no meta tag provides one; body text is
    never used as a substitute.
    """
    title = ""
    title_source = "none"
    title_from_tag = soup.title.get_text().strip() if soup.title else ""
    title_from_og = _meta_content(soup, property="og:title")
    if title_from_tag:
        title, title_source = title_from_tag, "title-tag"
    elif title_from_og:
        title, title_source = title_from_og, "og:title"

    description: str | None = None
    description_source = "none"
    meta_description = _meta_content(soup, name="description")
    og_description = _meta_content(soup, property="og:description")
    if meta_description:
        description, description_source = meta_description, "meta-name"
    elif og_description:
        description, description_source = og_description, "og:description"

    return title, title_source, description, description_source


def _is_internal_link(href: str, hostname: str) -> bool:
    if href.startswith("/") or not href.lower().startswith("http"):
        return True
    try:
        link_host = (urlparse(href).hostname or "").lower()
    except ValueError:
        return True
    return link_host == hostname or link_host.endswith(f".{hostname}") or hostname.endswith(f".{link_host}")


def analyze_links(soup: BeautifulSoup, base_url: str) -> LinkAnalysis:
    """Count links; content links exclude footer and ABC-index navigation."""
    hostname = (urlparse(base_url).hostname or "").lower()

    internal = 0
    external = 0
    for anchor in soup.find_all("a", href=True):
        href = (anchor["href"] or "").strip()
        if not href or href.lower().startswith(_SKIPPED_HREF_PREFIXES):
            continue
        if _is_internal_link(href, hostname):
            internal += 1
        else:
            external += 1

    footer_links = len(soup.select(FOOTER_SELECTORS))
    abc_index_links = len(soup.select(ABC_INDEX_SELECTORS))

    return {
        "total": internal + external,
        "internal": internal,
        "external": external,
        "footer_links": footer_links,
        "abc_index_links": abc_index_links,
        "content_links": max(0, internal - footer_links - abc_index_links),
    }


def extract_image_issues(soup: BeautifulSoup) -> list[ImageIssue]:
    """Images whose alt text is missing, empty or generic."""
    issues: list[ImageIssue] = []
    for img in soup.find_all("img"):
        src = "unknown"
        for attribute in _LAZY_SRC_ATTRIBUTES:
            value = (img.get(attribute) or "").strip()
            if value:
                src = value
                break
        filename = src.split("/")[-1].split("?")[0] or src

        alt = img.get("alt")
        if alt is None or not alt.strip():
            issues.append({"src": filename, "alt": None, "issue": "missing"})
            continue

        alt_text = alt.strip()
        if any(pattern.match(alt_text) for pattern in GENERIC_ALT_PATTERNS):
            issues.append({"src": filename, "alt": alt_text, "issue": "generic"})
    return issues


def _collect_types(item: object, out: list[str]) -> None:
    if not isinstance(item, dict):
        return
    raw_type = item.get("@type")
    types = raw_type if isinstance(raw_type, list) else [raw_type]
    for value in types:
        if isinstance(value, str) and value and value not in out:
            out.append(value)


def extract_schema_types(soup: BeautifulSoup) -> list[str]:
    """JSON-LD @type values, including members of @graph, in document order."""
    schema_types: list[str] = []
    for script_tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script_tag.string or "")
        except (ValueError, RecursionError):
            log.debug("Skipping unparseable JSON-LD block")
            continue

        for item in data if isinstance(data, list) else [data]:
            _collect_types(item, schema_types)
            graph = item.get("@graph") if isinstance(item, dict) else None
            if isinstance(graph, list):
                for graph_item in graph:
                    _collect_types(graph_item, schema_types)
    return schema_types


def extract_content_metrics(soup: BeautifulSoup) -> ContentMetrics:
    """Heading structure and text statistics. Expects scripts/styles removed."""
    heading_counts = _empty_heading_counts()
    for level in heading_counts:
        heading_counts[level] = len(soup.find_all(level))

    first_h1 = soup.find("h1")
    h1_text = first_h1.get_text(" ", strip=True) if first_h1 else ""

    visible_text = (soup.body or soup).get_text(separator=" ", strip=True)
    word_count = len(visible_text.split()) if visible_text else 0

    paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
    paragraph_count = len([p for p in paragraphs if len(p) > 20])

    sentences = [s for s in re.split(r"[.!?]+", visible_text) if len(s.strip()) > 5]
    sentence_count = len(sentences)

    return {
        "word_count": word_count,
        "paragraph_count": paragraph_count,
        "avg_paragraph_length": round(word_count / paragraph_count) if paragraph_count else 0,
        "sentence_count": sentence_count,
        "avg_sentence_length": round(word_count / sentence_count) if sentence_count else 0,
        "heading_counts": heading_counts,
        "h1_text": h1_text or None,
    }


def parse_page(html: str, url: str) -> ScrapedPage:
    """Extract all page signals from raw HTML."""
    soup = BeautifulSoup(html, "html.parser")
    result = safe_default(url)

    # Structured data lives in <script>, so read it before stripping scripts.
    result["schema_types"] = extract_schema_types(soup)
    for tag in soup.find_all(["script", "style", "noscript"]):
        tag.decompose()

    title, title_source, description, description_source = extract_metadata(soup)
    result["title"] = title
    result["title_source"] = title_source
    result["description"] = description
    result["description_source"] = description_source
    result["link_analysis"] = analyze_links(soup, urljoin(url, "/"))
    result["content_metrics"] = extract_content_metrics(soup)
    result["image_issues"] = extract_image_issues(soup)
    return result


def scrape_page(url: str) -> ScrapedPage:
    """
    Fetch the page at `url` and return its SEO signals.
    On any failure (network, invalid URL, parse error), returns safe defaults
    with `fetch_error` set.
    """
    formatted_url = normalize_url(url)
    http_status = 0
    started = time.perf_counter()

    try:
        response = requests.get(formatted_url, timeout=SCRAPE_TIMEOUT_SECONDS, headers=_REQUEST_HEADERS)
        http_status = response.status_code
        response.raise_for_status()
        response.encoding = response.apparent_encoding or "utf-8"
        html = response.text
    except (requests.RequestException, ValueError) as exc:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        log.warning("Scrape failed for %s: %s", formatted_url, exc)
        return safe_default(formatted_url, http_status, elapsed_ms, str(exc) or "Request failed")

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    try:
        result = parse_page(html, formatted_url)
    except (ValueError, TypeError, AttributeError, RecursionError) as exc:
        log.warning("Parse failed for %s: %s", formatted_url, exc)
        return safe_default(formatted_url, http_status, elapsed_ms, f"Could not parse page: {exc}")

    result["http_status"] = http_status
    result["response_time_ms"] = elapsed_ms
    log.info(
        "Scraped %s: page_type=%s words=%d content_links=%d image_issues=%d schema_types=%d",
        formatted_url,
        result["page_type"],
        result["content_metrics"]["word_count"],
        result["link_analysis"]["content_links"],
        len(result["image_issues"]),
        len(result["schema_types"]),
    )
    return result


def to_signal(scraped: ScrapedPage) -> ScrapedPageSignal:
    """Map scraper output onto the quick scan input shape."""
    return {
        "title": scraped["title"],
        "description": scraped["description"],
        "word_count": scraped["content_metrics"]["word_count"],
        "heading_counts": dict(scraped["content_metrics"]["heading_counts"]),
        "internal_link_count": scraped["link_analysis"]["internal"],
        "content_link_count": scraped["link_analysis"]["content_links"],
        "images_without_alt_count": len(scraped["image_issues"]),
        "schema_org_types": list(scraped["schema_types"]),
        "page_type": scraped["page_type"],
    }

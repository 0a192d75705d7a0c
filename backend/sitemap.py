"""Sitemap URLs with suggested anchor texts for internal linking."""

from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from config import SITEMAP_DEFAULT_LIMIT, SITEMAP_TIMEOUT_SECONDS
from logging_config import get_logger
from models import SitemapUrl
from scraper import normalize_url

log = get_logger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; PageScoreBot/1.0)",
    "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
}
MAX_CHILD_SITEMAPS = 20


def suggest_anchor(url: str) -> str:
    """
    Anchor text from the last path segment.
    "https://shop.nl/bad/whirlpool-bad" -> "Whirlpool Bad"
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return url
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "Home"
    words = segments[-1].replace("-", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def parse_sitemap_urls(urls: list[str], search: str | None = None, limit: int = SITEMAP_DEFAULT_LIMIT) -> list[SitemapUrl]:
    needle = (search or "").strip().lower()
    out: list[SitemapUrl] = []
    if limit < 1:
        return out
    for raw in urls:
        url = str(raw or "").strip()
        if not url or (needle and needle not in url.lower()):
            continue
        try:
            path = urlparse(url).path or "/"
        except ValueError:
            out.append({"url": url, "path": url, "suggested_anchor": url})
        else:
            out.append({"url": url, "path": path, "suggested_anchor": suggest_anchor(url)})
        if len(out) >= limit:
            break
    return out


def _fetch_locs(url: str) -> tuple[list[str], list[str]]:
    """Return (page urls, child sitemap urls) listed in one sitemap document."""
    response = requests.get(url, headers=_REQUEST_HEADERS, timeout=SITEMAP_TIMEOUT_SECONDS)
    response.raise_for_status()
    soup = BeautifulSoup(response.text, "html.parser")

    if soup.find("sitemapindex"):
        children = [loc.get_text(strip=True) for loc in soup.select("sitemap > loc")]
        return [], [child for child in children if child]

    pages = [loc.get_text(strip=True) for loc in soup.select("url > loc")]
    return [page for page in pages if page], []


def fetch_sitemap(domain: str, search: str | None = None, limit: int = SITEMAP_DEFAULT_LIMIT) -> dict:
    """
    Fetch <domain>/sitemap.xml (one level of sitemap index) and return
    {success, urls, total, error}. Never raises.
    """
    base = normalize_url(domain).rstrip("/")
    if not base:
        return {"success": False, "urls": [], "total": 0, "error": "Domain is required"}

    sitemap_url = f"{base}/sitemap.xml"
    try:
        pages, children = _fetch_locs(sitemap_url)
    except (requests.RequestException, ValueError) as exc:
        log.warning("Sitemap fetch failed for %s: %s", sitemap_url, exc)
        return {"success": False, "urls": [], "total": 0, "error": str(exc) or "Failed to fetch sitemap"}

    for child in children[:MAX_CHILD_SITEMAPS]:
        try:
            child_pages, _ = _fetch_locs(child)
        except (requests.RequestException, ValueError) as exc:
            log.warning("Skipping child sitemap %s: %s", child, exc)
            continue
        pages.extend(child_pages)

    parsed = parse_sitemap_urls(list(dict.fromkeys(pages)), search=search, limit=limit)
    log.info("Sitemap mapped for %s: %d URLs", base, len(parsed))
    return {"success": True, "urls": parsed, "total": len(parsed), "error": None}

"""Keyword rank tracking through the SerpApi Google engine."""

import time
from collections.abc import Callable, Iterable, Mapping
from urllib.parse import urlparse

import requests

import config
from logging_config import get_logger
from models import PositionChange, RankCheckResult

log = get_logger(__name__)

SERP_DEPTH = 100


class RankCheckError(Exception):
    """A ranking could not be determined (configuration, network or API error)."""


def position_change(current: int | None, previous: int | None) -> PositionChange:
    """Lower position is better, so moving from 8 to 3 is "up" by 5."""
    if current is None and previous is None:
        return {"direction": "same", "change": 0}
    if current is None:
        return {"direction": "lost", "change": 0}
    if previous is None:
        return {"direction": "new", "change": 0}

    change = previous - current
    if change > 0:
        return {"direction": "up", "change": change}
    if change < 0:
        return {"direction": "down", "change": abs(change)}
    return {"direction": "same", "change": 0}


def _clean_domain(domain: str) -> str:
    cleaned = str(domain or "").strip().lower()
    for prefix in ("https://", "http://"):
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
    return cleaned.replace("www.", "", 1).split("/")[0]


def find_domain_position(organic_results: Iterable[object], target_domain: str) -> tuple[int | None, dict | None]:
    """First organic result hosted on (or containing) the target domain."""
    target = _clean_domain(target_domain)
    if not target:
        return None, None

    for result in organic_results:
        if not isinstance(result, Mapping):
            continue
        try:
            host = (urlparse(str(result.get("link") or "")).hostname or "").lower()
        except ValueError:
            log.debug("Skipping malformed result link: %r", result.get("link"))
            continue
        host = host.replace("www.", "", 1)
        if not host:
            continue
        if target in host or host in target:
            try:
                position = int(result.get("position"))
            except (TypeError, ValueError):
                continue
            return position, dict(result)
    return None, None


def check_keyword_ranking(
    keyword: str,
    target_domain: str,
    location: str | None = None,
    device: str | None = None,
) -> RankCheckResult:
    """Look up the target domain in the top 100 Google results for `keyword`."""
    if not config.SERPAPI_API_KEY:
        raise RankCheckError("SerpApi API key not configured")
    if not str(keyword or "").strip() or not str(target_domain or "").strip():
        raise RankCheckError("Keyword and target domain are required")

    params = {
        "api_key": config.SERPAPI_API_KEY,
        "engine": "google",
        "q": keyword,
        "google_domain": "google.nl",
        "gl": "nl",
        "hl": "nl",
        "location": location or config.RANK_CHECK_LOCATION,
        "device": device or config.RANK_CHECK_DEVICE,
        "num": str(SERP_DEPTH),
    }

    log.info("Checking ranking for %r on %s", keyword, target_domain)
    try:
        response = requests.get(config.SERPAPI_ENDPOINT, params=params, timeout=config.RANK_CHECK_TIMEOUT_SECONDS)
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise RankCheckError(f"SerpApi request failed: {exc}") from exc

    if not isinstance(data, dict):
        raise RankCheckError("SerpApi returned an unexpected payload")
    if data.get("error"):
        raise RankCheckError(f"SerpApi error: {data['error']}")
    if response.status_code >= 400:
        raise RankCheckError(f"SerpApi request failed with status {response.status_code}")

    position, found = find_domain_position(data.get("organic_results") or [], target_domain)
    log.info("Ranking for %r: %s", keyword, position if position is not None else "not found")
    return {
        "keyword": keyword,
        "position": position,
        "url": (found or {}).get("link"),
        "title": (found or {}).get("title"),
        "snippet": (found or {}).get("snippet"),
        "found": position is not None,
    }


def batch_check_rankings(
    keywords: list[Mapping[str, str]],
    on_progress: Callable[[int, int, str], None] | None = None,
    delay_seconds: float | None = None,
    checker: Callable[[str, str], RankCheckResult] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """
    Check keywords one after another with a fixed pause between calls to
    respect the API rate limit. A failing keyword is counted, not raised.

    Each item needs "keyword" and "target_domain"; an optional "id" is echoed
    back in the per-keyword outcome.
    """
    delay = config.RANK_CHECK_DELAY_SECONDS if delay_seconds is None else max(0.0, delay_seconds)
    check = checker or check_keyword_ranking
    results: list[RankCheckResult] = []
    outcomes: list[dict] = []
    success = 0
    failed = 0

    for index, item in enumerate(keywords):
        keyword = str(item.get("keyword") or "")
        if on_progress is not None:
            on_progress(index, len(keywords), keyword)

        try:
            result = check(keyword, str(item.get("target_domain") or ""))
        except RankCheckError as exc:
            log.warning("Rank check failed for %r: %s", keyword, exc)
            failed += 1
            outcomes.append({"id": item.get("id"), "keyword": keyword, "result": None, "error": str(exc)})
        else:
            success += 1
            results.append(result)
            outcomes.append({"id": item.get("id"), "keyword": keyword, "result": result, "error": None})

        if index < len(keywords) - 1 and delay > 0:
            sleep(delay)

    return {"success": success, "failed": failed, "results": results, "outcomes": outcomes}

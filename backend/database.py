"""SQLite database setup, audit snapshots and tracked keywords.

Table: audits (immutable quick scan snapshots)
- id, url, page_type, score, is_quick_scan
- issues, metrics, requirements (JSON text)
- created_at

Table: keywords
- id, keyword, target_domain, category, is_tracking
- position, previous_position, last_checked, created_at

Table: rank_history
- id, keyword_id, position, url, title, snippet
- search_engine, location, device, checked_at
"""

import json
import sqlite3
from datetime import datetime, timezone

import config
from models import RankCheckResult, ScoreResult

DB_PATH = config.DB_PATH


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_connection() -> sqlite3.Connection:
    """Return a connection to the SQLite database."""
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db() -> None:
    """Create the tables if they do not exist."""
    conn = get_connection()
    try:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS audits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL,
                page_type TEXT NOT NULL,
                score INTEGER NOT NULL,
                is_quick_scan INTEGER NOT NULL DEFAULT 1,
                issues TEXT NOT NULL,
                metrics TEXT NOT NULL,
                requirements TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_audits_url ON audits(url);

            CREATE TABLE IF NOT EXISTS keywords (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                keyword TEXT NOT NULL,
                target_domain TEXT NOT NULL,
                category TEXT,
                is_tracking INTEGER NOT NULL DEFAULT 1,
                position INTEGER,
                previous_position INTEGER,
                last_checked TEXT,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS rank_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                keyword_id INTEGER NOT NULL REFERENCES keywords(id) ON DELETE CASCADE,
                position INTEGER,
                url TEXT,
                title TEXT,
                snippet TEXT,
                search_engine TEXT NOT NULL,
                location TEXT,
                device TEXT,
                checked_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_rank_history_keyword ON rank_history(keyword_id);
            """
        )
        conn.commit()
    finally:
        conn.close()


def _load_json(text: str, default: object) -> object:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default


def _audit_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "url": row["url"],
        "page_type": row["page_type"],
        "score": row["score"],
        "is_quick_scan": bool(row["is_quick_scan"]),
        "issues": _load_json(row["issues"], []),
        "metrics": _load_json(row["metrics"], {}),
        "requirements": _load_json(row["requirements"], {}),
        "created_at": row["created_at"],
    }


def insert_audit(url: str, result: ScoreResult, is_quick_scan: bool = True) -> int:
    """Store an audit snapshot and return its id."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            """
            INSERT INTO audits (url, page_type, score, is_quick_scan, issues, metrics, requirements, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                url,
                result["page_type"],
                int(result["score"]),
                int(is_quick_scan),
                json.dumps(result["issues"]),
                json.dumps(result["metrics"]),
                json.dumps(result["requirements"]),
                _now(),
            ),
        )
        conn.commit()
        return cursor.lastrowid
    finally:
        conn.close()


def get_audit(audit_id: int) -> dict | None:
    """Fetch an audit snapshot by id."""
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM audits WHERE id = ?", (audit_id,)).fetchone()
        return _audit_row(row) if row is not None else None
    finally:
        conn.close()


def list_audits(limit: int = 20, url: str | None = None) -> list[dict]:
    """Return recent audits, newest first, optionally for one URL."""
    safe_limit = max(1, min(100, int(limit)))
    conn = get_connection()
    try:
        if url:
            rows = conn.execute(
                "SELECT * FROM audits WHERE url = ? ORDER BY id DESC LIMIT ?",
                (url, safe_limit),
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM audits ORDER BY id DESC LIMIT ?", (safe_limit,)).fetchall()
        return [_audit_row(row) for row in rows]
    finally:
        conn.close()


def _keyword_row(row: sqlite3.Row) -> dict:
    return {
        "id": row["id"],
        "keyword": row["keyword"],
        "target_domain": row["target_domain"],
        "category": row["category"],
        "is_tracking": bool(row["is_tracking"]),
        "position": row["position"],
        "previous_position": row["previous_position"],
        "last_checked": row["last_checked"],
        "created_at": row["created_at"],
    }


def insert_keyword(keyword: str, target_domain: str, category: str | None = None) -> int:
    """Start tracking a keyword and return its id."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            "INSERT INTO keywords (keyword, target_domain, category, is_tracking, created_at) VALUES (?, ?, ?, 1, ?)",
            (keyword, target_domain, category, _now()),
        )
        conn.commit()
        return cursor.lastrowid
    finally:
        conn.close()


def get_keyword(keyword_id: int) -> dict | None:
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM keywords WHERE id = ?", (keyword_id,)).fetchone()
        return _keyword_row(row) if row is not None else None
    finally:
        conn.close()


def list_tracked_keywords() -> list[dict]:
    """Tracked keywords in alphabetical order."""
    conn = get_connection()
    try:
        rows = conn.execute("SELECT * FROM keywords WHERE is_tracking = 1 ORDER BY keyword ASC").fetchall()
        return [_keyword_row(row) for row in rows]
    finally:
        conn.close()


def delete_keyword(keyword_id: int) -> bool:
    """Remove a keyword and its history. Returns False if it did not exist."""
    conn = get_connection()
    try:
        cursor = conn.execute("DELETE FROM keywords WHERE id = ?", (keyword_id,))
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def update_keyword_domain(keyword_id: int, target_domain: str) -> bool:
    conn = get_connection()
    try:
        cursor = conn.execute("UPDATE keywords SET target_domain = ? WHERE id = ?", (target_domain, keyword_id))
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def record_rank_check(
    keyword_id: int,
    result: RankCheckResult,
    location: str | None = None,
    device: str | None = None,
) -> None:
    """Append a history row and shift the keyword's position into previous_position."""
    checked_at = _now()
    conn = get_connection()
    try:
        conn.execute(
            """
            INSERT INTO rank_history
                (keyword_id, position, url, title, snippet, search_engine, location, device, checked_at)
            VALUES (?, ?, ?, ?, ?, 'google', ?, ?, ?)
            """,
            (
                keyword_id,
                result["position"],
                result["url"],
                result["title"],
                result["snippet"],
                location,
                device,
                checked_at,
            ),
        )
        conn.execute(
            """
            UPDATE keywords
            SET previous_position = position, position = ?, last_checked = ?
            WHERE id = ?
            """,
            (result["position"], checked_at, keyword_id),
        )
        conn.commit()
    finally:
        conn.close()


def list_rank_history(keyword_id: int, limit: int = 30) -> list[dict]:
    """Ranking history for a keyword, newest first."""
    safe_limit = max(1, min(365, int(limit)))
    conn = get_connection()
    try:
        rows = conn.execute(
            """
            SELECT id, keyword_id, position, url, title, snippet, location, device, checked_at
            FROM rank_history
            WHERE keyword_id = ?
            ORDER BY checked_at DESC, id DESC
            LIMIT ?
            """,
            (keyword_id, safe_limit),
        ).fetchall()
        return [dict(row) for row in rows]
    finally:
        conn.close()

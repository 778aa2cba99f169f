# src/tenant_verification/tools/history.py
"""
Verification history: a short summary of each report, newest first.

The orchestrator never calls this; front ends that want history (the API's
/history endpoint, the CLI with --save) call ``save_report_summary`` after a
run. Summaries go to SQLite (capped at MAX_HISTORY rows) and are also appended
to a JSONL audit file that is never pruned.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import VerificationReport

logger = logging.getLogger(__name__)

MAX_HISTORY = 50
DEFAULT_DB = "verification_history.db"
DEFAULT_AUDIT_DIR = "runlogs"

# ---------- helpers ----------


def _db_path(db_path: Optional[str | os.PathLike[str]]) -> Path:
    return Path(db_path or os.getenv("VERIFICATION_HISTORY_DB", DEFAULT_DB))


def _ensure_db_schema(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS verification_history (
                id                INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at        TEXT NOT NULL,          -- report timestamp (UTC)
                name              TEXT,
                overall_score     INTEGER NOT NULL,
                risk_level        TEXT NOT NULL,
                coverage          TEXT NOT NULL,
                recommendations   TEXT                    -- JSON-encoded list of strings
            )
            """
        )
        conn.commit()


def summarize(report: VerificationReport) -> Dict[str, Any]:
    return {
        "created_at": report.timestamp.isoformat(),
        "name": report.tenant_data.full_name,
        "overall_score": report.overall_score,
        "risk_level": report.risk_level,
        "coverage": report.coverage,
        "recommendations": list(report.recommendations),
    }


def _insert_db_record(db_path: Path, summary: Dict[str, Any]) -> int:
    _ensure_db_schema(db_path)
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO verification_history
              (created_at, name, overall_score, risk_level, coverage, recommendations)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                summary["created_at"],
                summary["name"],
                summary["overall_score"],
                summary["risk_level"],
                summary["coverage"],
                json.dumps(summary["recommendations"], ensure_ascii=False),
            ),
        )
        row_id = int(cur.lastrowid)
        # keep only the newest MAX_HISTORY rows
        cur.execute(
            """
            DELETE FROM verification_history
            WHERE id NOT IN (SELECT id FROM verification_history ORDER BY id DESC LIMIT ?)
            """,
            (MAX_HISTORY,),
        )
        conn.commit()
        return row_id


def _append_jsonl_in_dir(out_dir: Path, payload: dict) -> Path:
    """Append as JSONL into <out_dir>/verifications.jsonl (ensure dir exists)."""
    out_dir.mkdir(parents=True, exist_ok=True)
    fpath = out_dir / "verifications.jsonl"
    with fpath.open("a", encoding="utf-8") as f:
        f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    return fpath


# ---------- public ----------


def save_report_summary(
    report: VerificationReport,
    db_path: Optional[str | os.PathLike[str]] = None,
    audit_dir: Optional[str | os.PathLike[str]] = None,
) -> Dict[str, Any]:
    """
    Persist a report summary (DB + JSONL audit).

    A failed DB write is logged and reported as ``db_row_id: None``; the audit
    line is still written so the run is not lost.
    """
    summary = summarize(report)

    row_id: Optional[int] = None
    try:
        row_id = _insert_db_record(_db_path(db_path), summary)
    except sqlite3.Error as exc:
        logger.warning("History DB write failed: %s", exc)

    audit_file = _append_jsonl_in_dir(
        Path(audit_dir or os.getenv("VERIFICATION_HISTORY_DIR", DEFAULT_AUDIT_DIR)),
        summary,
    )
    return {"db_row_id": row_id, "audit_file": str(audit_file)}


def load_history(
    limit: int = MAX_HISTORY,
    offset: int = 0,
    risk_level: Optional[str] = None,
    name: Optional[str] = None,
    db_path: Optional[str | os.PathLike[str]] = None,
) -> List[Dict[str, Any]]:
    """Newest first; ``name`` is a case-insensitive partial match."""
    path = _db_path(db_path)
    if not path.exists():
        return []

    clauses: List[str] = []
    params: List[Any] = []
    if risk_level:
        clauses.append("LOWER(risk_level) = LOWER(?)")
        params.append(risk_level)
    if name:
        clauses.append("LOWER(name) LIKE LOWER(?)")
        params.append(f"%{name}%")
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    with sqlite3.connect(path) as conn:
        conn.row_factory = sqlite3.Row
        rows = conn.execute(
            f"""
            SELECT id, created_at, name, overall_score, risk_level, coverage, recommendations
            FROM verification_history {where}
            ORDER BY id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, max(0, min(limit, MAX_HISTORY)), max(0, offset)),
        ).fetchall()

    history = []
    for r in rows:
        item = dict(r)
        item["recommendations"] = json.loads(item["recommendations"] or "[]")
        history.append(item)
    return history

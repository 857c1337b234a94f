"""Persistence helpers for coaching reports and generation locks."""
from __future__ import annotations

import datetime as dt
import json
import sqlite3
import uuid
from typing import Optional, Sequence

from session_reports.models import Clarification, CoachingReport, QuestionFeedback, Strength

from .sqlite import get_conn


def _record(row: sqlite3.Row) -> CoachingReport:
    return CoachingReport(
        id=row["id"],
        session_id=row["session_id"],
        strengths=[Strength(**item) for item in json.loads(row["strengths_json"])],
        clarifications=[Clarification(**item) for item in json.loads(row["clarifications_json"])],
        per_question_feedback=[QuestionFeedback(**item) for item in json.loads(row["feedback_json"])],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        avg_score=row["avg_score"],
        low_anxiety_enabled=bool(row["low_anxiety_enabled"]),
    )


_SELECT = """SELECT r.*, s.avg_score, s.low_anxiety_enabled
             FROM reports r JOIN sessions s ON s.id = r.session_id"""


def get_report(report_id: str) -> Optional[CoachingReport]:
    with get_conn() as conn:
        row = conn.execute(f"{_SELECT} WHERE r.id = ?", (report_id,)).fetchone()
    return _record(row) if row else None


def get_report_for_session(session_id: str) -> Optional[CoachingReport]:
    with get_conn() as conn:
        row = conn.execute(f"{_SELECT} WHERE r.session_id = ?", (session_id,)).fetchone()
    return _record(row) if row else None


def upsert_report(
    session_id: str,
    *,
    strengths: Sequence[Strength],
    clarifications: Sequence[Clarification],
    feedback: Sequence[QuestionFeedback],
) -> str:
    """Insert the report or replace its content in place, keyed on session id.

    The report id is stable across regenerations.
    """

    now = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO reports
               (id, session_id, strengths_json, clarifications_json, feedback_json, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(session_id) DO UPDATE SET
                 strengths_json = excluded.strengths_json,
                 clarifications_json = excluded.clarifications_json,
                 feedback_json = excluded.feedback_json,
                 updated_at = excluded.updated_at""",
            (
                str(uuid.uuid4()),
                session_id,
                json.dumps([item.model_dump() for item in strengths], ensure_ascii=False),
                json.dumps([item.model_dump() for item in clarifications], ensure_ascii=False),
                json.dumps([item.model_dump() for item in feedback], ensure_ascii=False),
                now,
                now,
            ),
        )
        row = conn.execute("SELECT id FROM reports WHERE session_id = ?", (session_id,)).fetchone()
    return str(row["id"])


def claim_generation(session_id: str, *, ttl_seconds: int) -> Optional[str]:
    """Take the per-session generation lock and return its token.

    Returns None when another run holds the lock. Claims older than
    ``ttl_seconds`` are treated as abandoned and replaced.
    """

    now = dt.datetime.now(dt.timezone.utc)
    token = uuid.uuid4().hex
    stale_before = (now - dt.timedelta(seconds=ttl_seconds)).isoformat()
    with get_conn() as conn:
        conn.execute(
            "DELETE FROM coaching_locks WHERE session_id = ? AND claimed_at < ?",
            (session_id, stale_before),
        )
        cur = conn.execute(
            "INSERT OR IGNORE INTO coaching_locks (session_id, token, claimed_at) VALUES (?, ?, ?)",
            (session_id, token, now.isoformat()),
        )
        return token if cur.rowcount == 1 else None


def release_generation(session_id: str, token: str) -> None:
    """Drop the lock only if ``token`` still owns it."""

    with get_conn() as conn:
        conn.execute(
            "DELETE FROM coaching_locks WHERE session_id = ? AND token = ?",
            (session_id, token),
        )


__all__ = [
    "get_report",
    "get_report_for_session",
    "upsert_report",
    "claim_generation",
    "release_generation",
]

"""Persistence helpers for practice sessions."""
from __future__ import annotations

import datetime as dt
import json
import sqlite3
import uuid
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from .sqlite import get_conn

ResponseMode = Literal["audio", "text"]


class SessionPayload(BaseModel):
    user_id: Optional[str] = None
    mode: ResponseMode
    question_count: int
    low_anxiety_enabled: bool = False
    job_description_text: Optional[str] = None
    started_at: str


class SessionRecord(BaseModel):
    id: str
    user_id: Optional[str] = None
    mode: ResponseMode
    question_count: int
    low_anxiety_enabled: bool
    job_description_text: Optional[str] = None
    completion_rate: float
    avg_score: Optional[float] = None
    started_at: str
    completed_at: Optional[str] = None
    draft_save: Optional[Dict[str, Any]] = None


def _record(row: sqlite3.Row) -> SessionRecord:
    draft = json.loads(row["draft_save"]) if row["draft_save"] else None
    return SessionRecord(
        id=row["id"],
        user_id=row["user_id"],
        mode=row["mode"],
        question_count=row["question_count"],
        low_anxiety_enabled=bool(row["low_anxiety_enabled"]),
        job_description_text=row["job_description_text"],
        completion_rate=row["completion_rate"],
        avg_score=row["avg_score"],
        started_at=row["started_at"],
        completed_at=row["completed_at"],
        draft_save=draft,
    )


def insert_session(**data: Any) -> SessionRecord:
    """Insert a session row and return the stored record."""

    payload = SessionPayload(**data)
    session_id = str(uuid.uuid4())
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO sessions
               (id, user_id, mode, question_count, low_anxiety_enabled,
                job_description_text, completion_rate, started_at)
               VALUES (?, ?, ?, ?, ?, ?, 0, ?)""",
            (
                session_id,
                payload.user_id,
                payload.mode,
                payload.question_count,
                int(payload.low_anxiety_enabled),
                payload.job_description_text,
                payload.started_at,
            ),
        )
        row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
    return _record(row)


def get_session(session_id: str) -> Optional[SessionRecord]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
    return _record(row) if row else None


def count_sessions_since(user_id: str, since: dt.datetime) -> int:
    """Count sessions owned by ``user_id`` started at or after ``since``."""

    with get_conn() as conn:
        row = conn.execute(
            "SELECT COUNT(*) FROM sessions WHERE user_id = ? AND started_at >= ?",
            (user_id, since.isoformat()),
        ).fetchone()
    return int(row[0])


def update_completion_rate(session_id: str, completion_rate: float) -> None:
    with get_conn() as conn:
        conn.execute(
            "UPDATE sessions SET completion_rate = ? WHERE id = ?",
            (completion_rate, session_id),
        )


def mark_completed(session_id: str, *, avg_score: Optional[float], completed_at: str) -> None:
    """Persist the aggregate score and the terminal timestamp."""

    with get_conn() as conn:
        conn.execute(
            "UPDATE sessions SET avg_score = ?, completed_at = ? WHERE id = ?",
            (avg_score, completed_at, session_id),
        )


def write_draft(session_id: str, draft: Optional[Dict[str, Any]]) -> None:
    """Overwrite the draft snapshot; ``None`` clears it."""

    payload = json.dumps(draft, ensure_ascii=False) if draft is not None else None
    with get_conn() as conn:
        conn.execute("UPDATE sessions SET draft_save = ? WHERE id = ?", (payload, session_id))


def read_draft(session_id: str) -> Optional[Dict[str, Any]]:
    with get_conn() as conn:
        row = conn.execute("SELECT draft_save FROM sessions WHERE id = ?", (session_id,)).fetchone()
    if row is None or not row["draft_save"]:
        return None
    return json.loads(row["draft_save"])


__all__ = [
    "ResponseMode",
    "SessionRecord",
    "insert_session",
    "get_session",
    "count_sessions_since",
    "update_completion_rate",
    "mark_completed",
    "write_draft",
    "read_draft",
]

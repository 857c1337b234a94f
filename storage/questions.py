"""Persistence helpers for session questions."""
from __future__ import annotations

import datetime as dt
import sqlite3
import uuid
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from .sqlite import get_conn


class QuestionPayload(BaseModel):
    question_order: int
    question_text: str
    category: str
    is_tailored: bool = False
    is_gentle: bool = False


class QuestionRecord(BaseModel):
    id: str
    session_id: str
    question_order: int
    question_text: str
    category: str
    is_tailored: bool
    is_gentle: bool


def _record(row: sqlite3.Row) -> QuestionRecord:
    return QuestionRecord(
        id=row["id"],
        session_id=row["session_id"],
        question_order=row["question_order"],
        question_text=row["question_text"],
        category=row["category"],
        is_tailored=bool(row["is_tailored"]),
        is_gentle=bool(row["is_gentle"]),
    )


def list_questions(session_id: str) -> List[QuestionRecord]:
    """Return the session's questions ordered by index."""

    with get_conn() as conn:
        rows = conn.execute(
            "SELECT * FROM questions WHERE session_id = ? ORDER BY question_order ASC",
            (session_id,),
        ).fetchall()
    return [_record(row) for row in rows]


def get_question(session_id: str, question_id: str) -> Optional[QuestionRecord]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM questions WHERE id = ? AND session_id = ?",
            (question_id, session_id),
        ).fetchone()
    return _record(row) if row else None


def insert_questions(session_id: str, items: Sequence[Any]) -> List[QuestionRecord]:
    """Insert the whole question set in one transaction.

    Raises ``sqlite3.IntegrityError`` when another writer already stored a
    set for the session; nothing is written in that case.
    """

    payloads = [item if isinstance(item, QuestionPayload) else QuestionPayload(**item) for item in items]
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    rows = [
        (
            str(uuid.uuid4()),
            session_id,
            payload.question_order,
            payload.question_text,
            payload.category,
            int(payload.is_tailored),
            int(payload.is_gentle),
            timestamp,
        )
        for payload in payloads
    ]
    with get_conn() as conn:
        conn.executemany(
            """INSERT INTO questions
               (id, session_id, question_order, question_text, category,
                is_tailored, is_gentle, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            rows,
        )
    return list_questions(session_id)


__all__ = ["QuestionPayload", "QuestionRecord", "list_questions", "get_question", "insert_questions"]

"""Persistence helpers for submitted answers."""
from __future__ import annotations

import datetime as dt
import sqlite3
import uuid
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .sqlite import get_conn


class AnswerExists(Exception):
    """Raised when the question already has a stored answer."""


class AnswerPayload(BaseModel):
    session_id: str
    question_id: str
    transcript_text: str = Field(min_length=1)
    duration_seconds: Optional[int] = None
    retake_used: bool = False
    extension_used: bool = False


class AnswerScoresPayload(BaseModel):
    situation: int = Field(ge=1, le=5)
    task: int = Field(ge=1, le=5)
    action: int = Field(ge=1, le=5)
    result: int = Field(ge=1, le=5)
    specificity_tag: str
    impact_tag: str
    clarity_tag: str
    honesty_flag: bool = False


class QuestionAnswerRow(BaseModel):
    """A question joined with its answer, when one exists."""

    question_id: str
    question_order: int
    question_text: str
    category: str
    answer_id: Optional[str] = None
    transcript_text: Optional[str] = None


def answer_exists(question_id: str) -> bool:
    with get_conn() as conn:
        row = conn.execute("SELECT 1 FROM answers WHERE question_id = ?", (question_id,)).fetchone()
    return row is not None


def insert_answer(**data: Any) -> str:
    """Insert an answer row and return its id.

    The ``UNIQUE(question_id)`` constraint is the authority on duplicates;
    a violation surfaces as :class:`AnswerExists`.
    """

    payload = AnswerPayload(**data)
    answer_id = str(uuid.uuid4())
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    try:
        with get_conn() as conn:
            conn.execute(
                """INSERT INTO answers
                   (id, session_id, question_id, transcript_text, duration_seconds,
                    retake_used, extension_used, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    answer_id,
                    payload.session_id,
                    payload.question_id,
                    payload.transcript_text,
                    payload.duration_seconds,
                    int(payload.retake_used),
                    int(payload.extension_used),
                    timestamp,
                ),
            )
    except sqlite3.IntegrityError as exc:
        if "answers.question_id" in str(exc):
            raise AnswerExists(payload.question_id) from exc
        raise
    return answer_id


def count_answers(session_id: str) -> int:
    with get_conn() as conn:
        row = conn.execute("SELECT COUNT(*) FROM answers WHERE session_id = ?", (session_id,)).fetchone()
    return int(row[0])


def list_question_answers(session_id: str) -> List[QuestionAnswerRow]:
    """Left-join every question of the session with its answer."""

    with get_conn() as conn:
        rows = conn.execute(
            """SELECT q.id AS question_id, q.question_order, q.question_text, q.category,
                      a.id AS answer_id, a.transcript_text
               FROM questions q
               LEFT JOIN answers a ON a.question_id = q.id
               WHERE q.session_id = ?
               ORDER BY q.question_order ASC""",
            (session_id,),
        ).fetchall()
    return [QuestionAnswerRow(**dict(row)) for row in rows]


def update_answer_scores(answer_id: str, **data: Any) -> None:
    """Enrich an answer in place with STAR scores and tags."""

    payload = AnswerScoresPayload(**data)
    with get_conn() as conn:
        conn.execute(
            """UPDATE answers
               SET star_situation_score = ?, star_task_score = ?, star_action_score = ?,
                   star_result_score = ?, specificity_tag = ?, impact_tag = ?,
                   clarity_tag = ?, honesty_flag = ?
               WHERE id = ?""",
            (
                payload.situation,
                payload.task,
                payload.action,
                payload.result,
                payload.specificity_tag,
                payload.impact_tag,
                payload.clarity_tag,
                int(payload.honesty_flag),
                answer_id,
            ),
        )


def get_answer_scores(answer_id: str) -> Optional[dict]:
    with get_conn() as conn:
        row = conn.execute(
            """SELECT star_situation_score, star_task_score, star_action_score, star_result_score,
                      specificity_tag, impact_tag, clarity_tag, honesty_flag
               FROM answers WHERE id = ?""",
            (answer_id,),
        ).fetchone()
    return dict(row) if row else None


__all__ = [
    "AnswerExists",
    "QuestionAnswerRow",
    "answer_exists",
    "insert_answer",
    "count_answers",
    "list_question_answers",
    "update_answer_scores",
    "get_answer_scores",
]

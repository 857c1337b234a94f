"""Reviewer access to raw answer transcripts, gated by the access threshold."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from config.settings import settings
from observability import log_event
from storage.answers import list_question_answers
from storage.flags import insert_audit_log
from storage.sessions import get_session

from .errors import NotFound, Unauthorized
from .scoring import session_meets_access_threshold


class TranscriptEntry(BaseModel):
    question_id: str
    question_order: int
    question_text: str
    category: str
    transcript_text: Optional[str] = None


class Transcript(BaseModel):
    session_id: str
    avg_score: Optional[float] = None
    completion_rate: float
    entries: List[TranscriptEntry]


def load_transcript(session_id: str, reviewer: Optional[str]) -> Transcript:
    """Return the session's answers to a configured reviewer, auditing the grant."""

    if not reviewer or reviewer not in settings.REVIEWER_IDS:
        raise Unauthorized("Unauthorized")
    session = get_session(session_id)
    if session is None:
        raise NotFound("Session not found")
    if not session_meets_access_threshold(session.avg_score, session.completion_rate):
        raise Unauthorized("Not eligible for transcript access")

    entries = [
        TranscriptEntry(
            question_id=row.question_id,
            question_order=row.question_order,
            question_text=row.question_text,
            category=row.category,
            transcript_text=row.transcript_text,
        )
        for row in list_question_answers(session.id)
    ]
    insert_audit_log(
        action_type="view_transcript",
        resource_type="session",
        resource_id=session.id,
        actor_id=reviewer,
        details={"avg_score": session.avg_score, "completion_rate": session.completion_rate},
    )
    log_event("transcript_viewed", session.id, outcome="granted")
    return Transcript(
        session_id=session.id,
        avg_score=session.avg_score,
        completion_rate=session.completion_rate,
        entries=entries,
    )


__all__ = ["TranscriptEntry", "Transcript", "load_transcript"]

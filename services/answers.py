"""Answer intake: validation, single-answer enforcement, completion tracking."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from observability import emit, log_event
from observability.events import QUESTION_ANSWERED
from storage.answers import AnswerExists, answer_exists, count_answers, insert_answer
from storage.questions import get_question
from storage.sessions import update_completion_rate

from .access import load_authorized_session
from .errors import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

MIN_ANSWER_CHARS = 10
MAX_ANSWER_CHARS = 5000
MAX_DURATION_SECONDS = 210
DUPLICATE_MESSAGE = "Answer already submitted for this question"


class AnswerMetadata(BaseModel):
    duration_seconds: Optional[int] = None
    retake_used: bool = False
    extension_used: bool = False


def validate_answer(text: str, metadata: AnswerMetadata) -> None:
    length = len(text or "")
    if length < MIN_ANSWER_CHARS:
        raise ValidationError(f"Answer must be at least {MIN_ANSWER_CHARS} characters")
    if length > MAX_ANSWER_CHARS:
        raise ValidationError(f"Answer must be at most {MAX_ANSWER_CHARS} characters")
    if metadata.duration_seconds is not None:
        if not 1 <= metadata.duration_seconds <= MAX_DURATION_SECONDS:
            raise ValidationError(f"durationSeconds must be between 1 and {MAX_DURATION_SECONDS}")


def submit_answer(
    session_id: str,
    question_id: str,
    text: str,
    metadata: Optional[AnswerMetadata],
    caller: Optional[str],
) -> str:
    """Store the answer for ``question_id`` and refresh the session completion rate."""

    metadata = metadata or AnswerMetadata()
    validate_answer(text, metadata)

    session = load_authorized_session(session_id, caller)
    if session.mode != "audio" and (metadata.retake_used or metadata.extension_used):
        raise ValidationError("Retake and extension are only available in audio mode")

    question = get_question(session.id, question_id)
    if question is None:
        raise NotFound("Question not found")

    if answer_exists(question.id):
        raise Conflict(DUPLICATE_MESSAGE)
    try:
        answer_id = insert_answer(
            session_id=session.id,
            question_id=question.id,
            transcript_text=text,
            duration_seconds=metadata.duration_seconds,
            retake_used=metadata.retake_used,
            extension_used=metadata.extension_used,
        )
    except AnswerExists as exc:
        raise Conflict(DUPLICATE_MESSAGE) from exc

    answered = count_answers(session.id)
    completion_rate = min(1.0, answered / session.question_count)
    update_completion_rate(session.id, completion_rate)

    log_event("answer_submitted", session.id, question_id=question.id, state=f"{answered}/{session.question_count}")
    emit(
        QUESTION_ANSWERED,
        session_id=session.id,
        user_id=caller,
        payload={
            "question_id": question.id,
            "question_order": question.question_order,
            "duration_seconds": metadata.duration_seconds,
            "completion_rate": completion_rate,
        },
    )
    return answer_id


__all__ = [
    "AnswerMetadata",
    "MIN_ANSWER_CHARS",
    "MAX_ANSWER_CHARS",
    "MAX_DURATION_SECONDS",
    "validate_answer",
    "submit_answer",
]

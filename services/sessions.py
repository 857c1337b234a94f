"""Session registry: creation rules and the daily quota."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel

from config.settings import settings
from observability import emit, log_event
from observability.events import SESSION_START
from storage.sessions import ResponseMode, SessionRecord, count_sessions_since, insert_session

from .errors import RateLimited, ValidationError

GENTLE_COUNT_MESSAGE = "Low-Anxiety Mode requires exactly 3 questions"


class SessionConfig(BaseModel):
    mode: ResponseMode
    question_count: int
    low_anxiety_enabled: bool = False
    job_description_text: Optional[str] = None


class CreatedSession(BaseModel):
    session_id: str
    mode: ResponseMode
    question_count: int
    low_anxiety_enabled: bool


def start_of_day(now: dt.datetime) -> dt.datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def validate_config(config: SessionConfig) -> None:
    if not settings.MIN_QUESTIONS <= config.question_count <= settings.MAX_QUESTIONS:
        raise ValidationError(
            f"questionCount must be between {settings.MIN_QUESTIONS} and {settings.MAX_QUESTIONS}"
        )
    if config.low_anxiety_enabled and config.question_count != settings.GENTLE_QUESTION_COUNT:
        raise ValidationError(GENTLE_COUNT_MESSAGE)


def create_session(
    config: SessionConfig,
    caller: Optional[str],
    *,
    now: Optional[dt.datetime] = None,
) -> CreatedSession:
    """Validate ``config``, enforce the daily quota for identified callers, persist."""

    validate_config(config)
    now = now or dt.datetime.now(dt.timezone.utc)

    if caller is not None:
        started_today = count_sessions_since(caller, start_of_day(now))
        if started_today >= settings.DAILY_SESSION_LIMIT:
            raise RateLimited(
                f"You've reached your limit of {settings.DAILY_SESSION_LIMIT} sessions today. Come back tomorrow!"
            )

    record: SessionRecord = insert_session(
        user_id=caller,
        mode=config.mode,
        question_count=config.question_count,
        low_anxiety_enabled=config.low_anxiety_enabled,
        job_description_text=config.job_description_text,
        started_at=now.isoformat(),
    )
    log_event("session_created", record.id, mode=record.mode, guest=caller is None)
    emit(
        SESSION_START,
        session_id=record.id,
        user_id=caller,
        payload={"mode": record.mode, "low_anxiety": record.low_anxiety_enabled, "guest": caller is None},
    )
    return CreatedSession(
        session_id=record.id,
        mode=record.mode,
        question_count=record.question_count,
        low_anxiety_enabled=record.low_anxiety_enabled,
    )


__all__ = ["SessionConfig", "CreatedSession", "GENTLE_COUNT_MESSAGE", "start_of_day", "validate_config", "create_session"]

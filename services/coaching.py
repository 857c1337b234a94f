"""Coaching orchestrator: scores answered questions and assembles the session report."""
from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from coaching_agent.models import CoachingResult, ScoredItem, SessionSummary
from config.registry import COACH_KEY, SUMMARY_KEY, get_model
from config.settings import settings
from observability import emit, log_event, span
from observability.events import COACHING_VIEWED
from session_reports.models import CoachingReport, FeedbackScores, QuestionFeedback
from session_reports.pdf import generate_coaching_report_pdf
from storage.answers import QuestionAnswerRow, list_question_answers, update_answer_scores
from storage.reports import (
    claim_generation,
    get_report as fetch_report,
    get_report_for_session,
    release_generation,
    upsert_report,
)
from storage.sessions import SessionRecord, get_session, mark_completed, write_draft

from .access import authorize, load_authorized_session
from .errors import Conflict, NotFound, UpstreamFailure, ValidationError
from .scoring import (
    average_of_four,
    follow_up_question,
    missing_elements,
    normalize_scores,
    qualitative_label,
    session_average,
)

logger = logging.getLogger(__name__)

MAX_SUMMARY_ITEMS = 3


class CoachingState(str, Enum):
    NOT_READY = "not_ready"
    SCORING = "scoring"
    COMPLETE = "complete"
    ALREADY_REPORTED = "already_reported"


class CoachingOutcome(BaseModel):
    report_id: str
    session_id: str
    state: CoachingState


class ReportView(BaseModel):
    report: CoachingReport
    is_guest: bool


def _coach_one(row: QuestionAnswerRow, job_description: Optional[str]) -> CoachingResult:
    coach = get_model(COACH_KEY)
    result = coach(
        question=row.question_text,
        answer=row.transcript_text,
        category=row.category,
        job_description=job_description,
    )
    return CoachingResult.model_validate(result)


def _score_all(
    session: SessionRecord,
    answered: List[QuestionAnswerRow],
) -> List[Tuple[QuestionAnswerRow, CoachingResult]]:
    """Run the per-question coaching calls; one failure never cancels the rest."""

    workers = max(1, min(settings.COACHING_MAX_WORKERS, len(answered)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="coach") as pool:
        futures = [(row, pool.submit(_coach_one, row, session.job_description_text)) for row in answered]
        settled: List[Tuple[QuestionAnswerRow, CoachingResult]] = []
        for row, future in futures:
            try:
                settled.append((row, future.result()))
            except Exception as exc:
                logger.warning("Coaching failed for question %s: %s", row.question_id, exc)
                log_event(
                    "coaching_item_failed",
                    session.id,
                    level=logging.WARNING,
                    question_id=row.question_id,
                    error=type(exc).__name__,
                )
    return settled


def _feedback(row: QuestionAnswerRow, result: CoachingResult) -> Tuple[QuestionFeedback, Dict[str, Any]]:
    scores = normalize_scores(result.star_scores.model_dump())
    average = average_of_four(scores)
    missing = missing_elements(scores)
    feedback = QuestionFeedback(
        question_id=row.question_id,
        question_order=row.question_order,
        question_text=row.question_text,
        narrative=result.narrative,
        example_answer=result.example_answer,
        scores=FeedbackScores(
            **scores.model_dump(),
            specificity_tag=result.specificity_tag,
            impact_tag=result.impact_tag,
            clarity_tag=result.clarity_tag,
        ),
        average=average,
        label=qualitative_label(average),
        missing_elements=missing,
        follow_up=follow_up_question(missing),
    )
    stored = {
        **scores.model_dump(),
        "specificity_tag": result.specificity_tag,
        "impact_tag": result.impact_tag,
        "clarity_tag": result.clarity_tag,
        "honesty_flag": result.honesty_flag,
    }
    return feedback, stored


def _summarize(session: SessionRecord, scored: List[Tuple[QuestionAnswerRow, CoachingResult]]) -> SessionSummary:
    summarize = get_model(SUMMARY_KEY)
    items = [
        ScoredItem(question_text=row.question_text, answer_text=row.transcript_text or "", coaching=result)
        for row, result in scored
    ]
    try:
        summary = SessionSummary.model_validate(
            summarize(items=items, job_description=session.job_description_text)
        )
    except Exception as exc:
        logger.exception("Session summary failed for %s", session.id)
        raise UpstreamFailure("Failed to generate coaching summary") from exc
    return SessionSummary(
        strengths=summary.strengths[:MAX_SUMMARY_ITEMS],
        clarifications=summary.clarifications[:MAX_SUMMARY_ITEMS],
    )


def _generate(session: SessionRecord, caller: Optional[str], regenerate: bool) -> CoachingOutcome:
    existing = get_report_for_session(session.id)
    if existing is not None and not regenerate:
        return CoachingOutcome(report_id=existing.id, session_id=session.id, state=CoachingState.ALREADY_REPORTED)

    rows = list_question_answers(session.id)
    answered = [row for row in rows if row.answer_id is not None]
    if not answered:
        log_event("coaching_state", session.id, state=CoachingState.NOT_READY.value)
        raise ValidationError("No answers submitted yet")

    log_event("coaching_state", session.id, state=CoachingState.SCORING.value, outcome=len(answered))
    with span("coaching.score", session.id):
        scored = _score_all(session, answered)
    if not scored:
        raise UpstreamFailure("Failed to generate coaching for any answer")

    feedback: List[QuestionFeedback] = []
    for row, result in scored:
        item, stored = _feedback(row, result)
        update_answer_scores(row.answer_id, **stored)
        feedback.append(item)
    aggregate = session_average([item.average for item in feedback])

    with span("coaching.summarize", session.id):
        summary = _summarize(session, scored)

    report_id = upsert_report(
        session.id,
        strengths=summary.strengths,
        clarifications=summary.clarifications,
        feedback=feedback,
    )
    mark_completed(
        session.id,
        avg_score=aggregate,
        completed_at=dt.datetime.now(dt.timezone.utc).isoformat(),
    )
    write_draft(session.id, None)

    log_event(
        "coaching_state",
        session.id,
        state=CoachingState.COMPLETE.value,
        scored=len(scored),
        failed=len(answered) - len(scored),
        avg_score=aggregate,
    )
    emit(
        COACHING_VIEWED,
        session_id=session.id,
        user_id=caller,
        payload={"avg_score": aggregate, "scored": len(scored), "regenerated": existing is not None},
    )
    return CoachingOutcome(report_id=report_id, session_id=session.id, state=CoachingState.COMPLETE)


def generate_coaching(session_id: str, caller: Optional[str], *, regenerate: bool = False) -> CoachingOutcome:
    """Produce (or return) the session's coaching report.

    An existing report short-circuits unless ``regenerate`` is set. Generation
    holds the per-session lock for its whole duration, so concurrent requests
    for the same session get :class:`Conflict` instead of racing.
    """

    session = load_authorized_session(session_id, caller)
    if not regenerate:
        existing = get_report_for_session(session.id)
        if existing is not None:
            return CoachingOutcome(report_id=existing.id, session_id=session.id, state=CoachingState.ALREADY_REPORTED)

    token = claim_generation(session.id, ttl_seconds=settings.COACHING_LOCK_TTL_SECONDS)
    if token is None:
        raise Conflict("Coaching generation already in progress")
    try:
        return _generate(session, caller, regenerate)
    finally:
        release_generation(session.id, token)


def get_report(report_id: str, caller: Optional[str]) -> ReportView:
    report = fetch_report(report_id)
    if report is None:
        raise NotFound("Report not found")
    session = get_session(report.session_id)
    if session is None:
        raise NotFound("Session not found")
    authorize(session, caller)
    return ReportView(report=report, is_guest=session.user_id is None)


def render_report_pdf(report_id: str, caller: Optional[str]) -> bytes:
    view = get_report(report_id, caller)
    return generate_coaching_report_pdf(view.report)


__all__ = [
    "CoachingState",
    "CoachingOutcome",
    "ReportView",
    "generate_coaching",
    "get_report",
    "render_report_pdf",
]

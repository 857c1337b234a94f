"""FastAPI routes for practice sessions, coaching reports and cron jobs."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Response

from api.schemas import (
    CapabilitiesResp,
    ClarificationItem,
    CoachingResp,
    CostCapResp,
    CreateSessionReq,
    CreateSessionResp,
    DraftResp,
    DraftSavedResp,
    FeedbackScoresItem,
    QuestionFeedbackItem,
    QuestionItem,
    QuestionsResp,
    ReportResp,
    StrengthItem,
    SubmitAnswerReq,
    SubmitAnswerResp,
    SuccessResp,
    TranscriptEntryItem,
    TranscriptResp,
)
from config.settings import settings
from services.answers import AnswerMetadata, submit_answer
from services.coaching import ReportView, generate_coaching, get_report, render_report_pdf
from services.costs import enforce_capability_gate, is_capability_enabled, reset_capability
from services.drafts import DraftState, clear_draft, load_draft, save_draft
from services.errors import Unauthorized
from services.questions import ensure_questions
from services.sessions import SessionConfig, create_session
from services.transcripts import load_transcript

router = APIRouter(prefix="/api")


def caller_identity(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Authenticated identity forwarded by the gateway; absent for guests."""

    return x_user_id or None


def require_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    if not settings.CRON_SECRET or x_cron_secret != settings.CRON_SECRET:
        raise Unauthorized("Unauthorized")


@router.post("/sessions", response_model=CreateSessionResp, status_code=201)
def start_session(req: CreateSessionReq, caller: Optional[str] = Depends(caller_identity)) -> CreateSessionResp:
    created = create_session(
        SessionConfig(
            mode=req.mode,
            question_count=req.questionCount,
            low_anxiety_enabled=req.lowAnxietyEnabled,
            job_description_text=req.jobDescriptionText,
        ),
        caller,
    )
    return CreateSessionResp(
        sessionId=created.session_id,
        mode=created.mode,
        questionCount=created.question_count,
        lowAnxietyEnabled=created.low_anxiety_enabled,
    )


@router.post("/sessions/{session_id}/questions", response_model=QuestionsResp)
def provision_questions(session_id: str, caller: Optional[str] = Depends(caller_identity)) -> QuestionsResp:
    questions = ensure_questions(session_id, caller)
    return QuestionsResp(
        questions=[
            QuestionItem(id=q.id, text=q.question_text, category=q.category, order=q.question_order)
            for q in questions
        ]
    )


@router.post("/answers", response_model=SubmitAnswerResp, status_code=201)
def answer(req: SubmitAnswerReq, caller: Optional[str] = Depends(caller_identity)) -> SubmitAnswerResp:
    answer_id = submit_answer(
        req.sessionId,
        req.questionId,
        req.text,
        AnswerMetadata(
            duration_seconds=req.durationSeconds,
            retake_used=req.retakeUsed,
            extension_used=req.extensionUsed,
        ),
        caller,
    )
    return SubmitAnswerResp(answerId=answer_id)


@router.post("/sessions/{session_id}/coaching", response_model=CoachingResp)
def coaching(
    session_id: str,
    regenerate: bool = False,
    caller: Optional[str] = Depends(caller_identity),
) -> CoachingResp:
    outcome = generate_coaching(session_id, caller, regenerate=regenerate)
    return CoachingResp(reportId=outcome.report_id, sessionId=outcome.session_id, state=outcome.state.value)


@router.get("/sessions/{session_id}/draft", response_model=DraftResp)
def fetch_draft(session_id: str, caller: Optional[str] = Depends(caller_identity)) -> DraftResp:
    return DraftResp(draft=load_draft(session_id, caller))


@router.post("/sessions/{session_id}/draft", response_model=DraftSavedResp)
def store_draft(
    session_id: str,
    state: DraftState,
    caller: Optional[str] = Depends(caller_identity),
) -> DraftSavedResp:
    return DraftSavedResp(draft=save_draft(session_id, caller, state))


@router.delete("/sessions/{session_id}/draft", response_model=SuccessResp)
def drop_draft(session_id: str, caller: Optional[str] = Depends(caller_identity)) -> SuccessResp:
    clear_draft(session_id, caller)
    return SuccessResp()


def _report_resp(view: ReportView) -> ReportResp:  # Map stored report to camelCase payload
    report = view.report
    return ReportResp(
        id=report.id,
        sessionId=report.session_id,
        strengths=[StrengthItem(text=s.text, evidence=s.evidence) for s in report.strengths],
        clarifications=[
            ClarificationItem(suggestion=c.suggestion, rationale=c.rationale) for c in report.clarifications
        ],
        perQuestionFeedback=[
            QuestionFeedbackItem(
                questionId=item.question_id,
                questionOrder=item.question_order,
                questionText=item.question_text,
                narrative=item.narrative,
                exampleAnswer=item.example_answer,
                scores=FeedbackScoresItem(
                    situation=item.scores.situation,
                    task=item.scores.task,
                    action=item.scores.action,
                    result=item.scores.result,
                    specificityTag=item.scores.specificity_tag,
                    impactTag=item.scores.impact_tag,
                    clarityTag=item.scores.clarity_tag,
                ),
                average=item.average,
                label=item.label,
                missingElements=item.missing_elements,
                followUpQuestion=item.follow_up,
            )
            for item in report.per_question_feedback
        ],
        avgScore=report.avg_score,
        lowAnxietyEnabled=report.low_anxiety_enabled,
        createdAt=report.created_at,
        updatedAt=report.updated_at,
        isGuest=view.is_guest,
    )


@router.get("/reports/{report_id}", response_model=ReportResp)
def fetch_report(report_id: str, caller: Optional[str] = Depends(caller_identity)) -> ReportResp:
    return _report_resp(get_report(report_id, caller))


@router.get("/reports/{report_id}/pdf")
def fetch_report_pdf(report_id: str, caller: Optional[str] = Depends(caller_identity)) -> Response:
    payload = render_report_pdf(report_id, caller)
    headers = {"Content-Disposition": f"attachment; filename=\"coaching-report-{report_id}.pdf\""}
    return Response(content=payload, media_type="application/pdf", headers=headers)


@router.get("/capabilities", response_model=CapabilitiesResp)
def capabilities() -> CapabilitiesResp:
    return CapabilitiesResp(audioModeEnabled=is_capability_enabled())


@router.get("/admin/transcripts/{session_id}", response_model=TranscriptResp)
def reviewer_transcript(session_id: str, caller: Optional[str] = Depends(caller_identity)) -> TranscriptResp:
    transcript = load_transcript(session_id, caller)
    return TranscriptResp(
        sessionId=transcript.session_id,
        avgScore=transcript.avg_score,
        completionRate=transcript.completion_rate,
        answers=[
            TranscriptEntryItem(
                questionId=entry.question_id,
                questionOrder=entry.question_order,
                questionText=entry.question_text,
                category=entry.category,
                text=entry.transcript_text,
            )
            for entry in transcript.entries
        ],
    )


@router.post("/cron/enforce-cost-cap", response_model=CostCapResp, dependencies=[Depends(require_cron_secret)])
def enforce_cost_cap() -> CostCapResp:
    result = enforce_capability_gate()
    return CostCapResp(audioEnabled=result.enabled, total=result.total, threshold=result.threshold)


@router.post("/cron/reset-audio-mode", response_model=SuccessResp, dependencies=[Depends(require_cron_secret)])
def reset_audio_mode() -> SuccessResp:
    reset_capability()
    return SuccessResp()

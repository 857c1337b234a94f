"""Pydantic schemas for the practice session API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class CreateSessionReq(BaseModel):
    mode: Literal["audio", "text"]
    questionCount: int
    lowAnxietyEnabled: bool = False
    jobDescriptionText: Optional[str] = None


class CreateSessionResp(BaseModel):
    sessionId: str
    mode: str
    questionCount: int
    lowAnxietyEnabled: bool


class QuestionItem(BaseModel):
    id: str
    text: str
    category: str
    order: int


class QuestionsResp(BaseModel):
    questions: List[QuestionItem] = Field(default_factory=list)


class SubmitAnswerReq(BaseModel):
    sessionId: str
    questionId: str
    text: str
    durationSeconds: Optional[int] = None
    retakeUsed: bool = False
    extensionUsed: bool = False


class SubmitAnswerResp(BaseModel):
    answerId: str
    success: bool = True


class CoachingResp(BaseModel):
    reportId: str
    sessionId: str
    completed: bool = True
    state: str


class DraftResp(BaseModel):
    draft: Optional[Dict[str, Any]] = None


class DraftSavedResp(BaseModel):
    success: bool = True
    draft: Dict[str, Any]


class SuccessResp(BaseModel):
    success: bool = True


class StrengthItem(BaseModel):
    text: str
    evidence: str


class ClarificationItem(BaseModel):
    suggestion: str
    rationale: str


class FeedbackScoresItem(BaseModel):
    situation: int
    task: int
    action: int
    result: int
    specificityTag: str
    impactTag: str
    clarityTag: str


class QuestionFeedbackItem(BaseModel):
    questionId: str
    questionOrder: int
    questionText: str
    narrative: str
    exampleAnswer: str
    scores: FeedbackScoresItem
    average: float
    label: str
    missingElements: List[str] = Field(default_factory=list)
    followUpQuestion: Optional[str] = None


class ReportResp(BaseModel):
    id: str
    sessionId: str
    strengths: List[StrengthItem] = Field(default_factory=list)
    clarifications: List[ClarificationItem] = Field(default_factory=list)
    perQuestionFeedback: List[QuestionFeedbackItem] = Field(default_factory=list)
    avgScore: Optional[float] = None
    lowAnxietyEnabled: bool = False
    createdAt: str
    updatedAt: str
    isGuest: bool


class CapabilitiesResp(BaseModel):
    audioModeEnabled: bool


class TranscriptEntryItem(BaseModel):
    questionId: str
    questionOrder: int
    questionText: str
    category: str
    text: Optional[str] = None


class TranscriptResp(BaseModel):
    sessionId: str
    avgScore: Optional[float] = None
    completionRate: float
    answers: List[TranscriptEntryItem] = Field(default_factory=list)


class CostCapResp(BaseModel):
    audioEnabled: bool
    total: float
    threshold: float

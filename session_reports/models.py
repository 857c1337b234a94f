from __future__ import annotations  # Coaching report domain models

from typing import List, Optional

from pydantic import BaseModel, Field


class StarScores(BaseModel):  # Four STAR element scores, 1-5 each
    situation: int = Field(ge=1, le=5)
    task: int = Field(ge=1, le=5)
    action: int = Field(ge=1, le=5)
    result: int = Field(ge=1, le=5)


class Strength(BaseModel):  # Strength observed across the session
    text: str
    evidence: str


class Clarification(BaseModel):  # Suggested clarification for resume or cover letter
    suggestion: str
    rationale: str


class FeedbackScores(StarScores):  # Scores and tags echoed into per-question feedback
    specificity_tag: str
    impact_tag: str
    clarity_tag: str


class QuestionFeedback(BaseModel):  # Narrative and rewrite for one scored question
    question_id: str
    question_order: int
    question_text: str
    narrative: str
    example_answer: str
    scores: FeedbackScores
    average: float
    label: str
    missing_elements: List[str] = Field(default_factory=list)
    follow_up: Optional[str] = None


class CoachingReport(BaseModel):  # Stored end-of-session report
    id: str
    session_id: str
    strengths: List[Strength] = Field(default_factory=list)
    clarifications: List[Clarification] = Field(default_factory=list)
    per_question_feedback: List[QuestionFeedback] = Field(default_factory=list)
    created_at: str
    updated_at: str
    avg_score: Optional[float] = None
    low_anxiety_enabled: bool = False


__all__ = [
    "StarScores",
    "Strength",
    "Clarification",
    "FeedbackScores",
    "QuestionFeedback",
    "CoachingReport",
]

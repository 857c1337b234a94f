from __future__ import annotations  # Coaching service request and response schemas

from typing import List, Literal

from pydantic import BaseModel, Field

from session_reports.models import Clarification, Strength

SpecificityTag = Literal["specific", "vague", "unclear"]
ImpactTag = Literal["high_impact", "medium_impact", "low_impact"]
ClarityTag = Literal["clear", "rambling", "incomplete"]


class RawStarScores(BaseModel):  # Unclamped STAR scores as returned by the model
    situation: float = Field(allow_inf_nan=False)
    task: float = Field(allow_inf_nan=False)
    action: float = Field(allow_inf_nan=False)
    result: float = Field(allow_inf_nan=False)


class CoachingResult(BaseModel):  # Per-answer coaching payload
    star_scores: RawStarScores
    specificity_tag: SpecificityTag
    impact_tag: ImpactTag
    clarity_tag: ClarityTag
    honesty_flag: bool = False
    narrative: str
    example_answer: str


class ScoredItem(BaseModel):  # Question/answer/coaching tuple fed to the session summary
    question_text: str
    answer_text: str
    coaching: CoachingResult


class SessionSummary(BaseModel):  # Strengths and clarifications synthesized across answers
    strengths: List[Strength] = Field(default_factory=list)
    clarifications: List[Clarification] = Field(default_factory=list)


__all__ = [
    "SpecificityTag",
    "ImpactTag",
    "ClarityTag",
    "RawStarScores",
    "CoachingResult",
    "ScoredItem",
    "SessionSummary",
]

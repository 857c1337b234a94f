from __future__ import annotations  # Session report package exports

from .models import (
    Clarification,
    CoachingReport,
    FeedbackScores,
    QuestionFeedback,
    StarScores,
    Strength,
)
from .pdf import generate_coaching_report_pdf

__all__ = [
    "Clarification",
    "CoachingReport",
    "FeedbackScores",
    "QuestionFeedback",
    "StarScores",
    "Strength",
    "generate_coaching_report_pdf",
]

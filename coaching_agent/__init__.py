from __future__ import annotations  # Coaching agent package exports

from .coach import bind_with_config, coach_answer, summarize_session
from .models import CoachingResult, RawStarScores, ScoredItem, SessionSummary

__all__ = [
    "CoachingResult",
    "RawStarScores",
    "ScoredItem",
    "SessionSummary",
    "bind_with_config",
    "coach_answer",
    "summarize_session",
]

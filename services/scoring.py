"""STAR scoring normalization and aggregation helpers.

Everything here is pure: no I/O, no clock. The recruiter access threshold is
exposed on its own so read-time access checks can evaluate it outside the
coaching flow.
"""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Sequence, Union

from session_reports.models import StarScores

STAR_ELEMENTS = ("situation", "task", "action", "result")

ACCESS_MIN_AVERAGE = 4.2
ACCESS_MIN_COMPLETION = 0.7
MISSING_BELOW = 3

ScoreInput = Union[StarScores, Mapping[str, float], Sequence[float]]

_FOLLOW_UPS: Dict[str, str] = {
    "situation": "Can you provide more context about the situation? What was happening at the time?",
    "task": "What was your specific responsibility or goal in this situation?",
    "action": "Can you walk me through the specific steps you took?",
    "result": "What was the outcome? Can you quantify the impact if possible?",
}


def _round_half_up(value: float, digits: int = 0) -> float:
    """Round halves up instead of to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _values(scores: ScoreInput) -> List[float]:
    if isinstance(scores, StarScores):
        return [float(getattr(scores, name)) for name in STAR_ELEMENTS]
    if isinstance(scores, Mapping):
        return [float(scores[name]) for name in STAR_ELEMENTS]
    values = [float(item) for item in scores]
    if len(values) != len(STAR_ELEMENTS):
        raise ValueError(f"Expected {len(STAR_ELEMENTS)} STAR scores, got {len(values)}")
    return values


def clamp_score(value: float) -> int:
    """Round to the nearest integer and clamp into [1, 5]."""

    value = float(value)
    if math.isnan(value):
        return 1
    if math.isinf(value):
        return 5 if value > 0 else 1
    return int(min(5, max(1, _round_half_up(value))))


def average_of_four(scores: ScoreInput) -> float:
    """Mean of the four STAR elements rounded to two decimals."""

    values = _values(scores)
    return round(sum(values) / len(values), 2)


def qualitative_label(avg: float) -> str:
    if avg >= 4.5:
        return "Excellent"
    if avg >= 3.5:
        return "Strong"
    if avg >= 2.5:
        return "Adequate"
    if avg >= 1.5:
        return "Needs Improvement"
    return "Missing"


def missing_elements(scores: ScoreInput) -> List[str]:
    """STAR elements scored below 3, in fixed element order."""

    return [
        name.capitalize()
        for name, value in zip(STAR_ELEMENTS, _values(scores))
        if value < MISSING_BELOW
    ]


def follow_up_question(missing: Sequence[str]) -> Optional[str]:
    """Prompt targeting the first missing element, if any."""

    if not missing:
        return None
    return _FOLLOW_UPS.get(missing[0].lower())


def meets_access_threshold(scores: ScoreInput, completion_rate: float) -> bool:
    """Whether a reviewer may see the raw answer text behind these scores."""

    return average_of_four(scores) >= ACCESS_MIN_AVERAGE and completion_rate >= ACCESS_MIN_COMPLETION


def session_meets_access_threshold(avg_score: Optional[float], completion_rate: Optional[float]) -> bool:
    """Threshold check against a session's stored aggregate."""

    if avg_score is None:
        return False
    return avg_score >= ACCESS_MIN_AVERAGE and (completion_rate or 0.0) >= ACCESS_MIN_COMPLETION


def normalize_scores(scores: ScoreInput) -> StarScores:
    """Clamp raw model scores into a valid :class:`StarScores`."""

    values = [clamp_score(value) for value in _values(scores)]
    return StarScores(**dict(zip(STAR_ELEMENTS, values)))


def session_average(averages: Sequence[float]) -> Optional[float]:
    """Mean of per-answer averages rounded to two decimals; None when empty."""

    if not averages:
        return None
    return round(sum(averages) / len(averages), 2)


__all__ = [
    "STAR_ELEMENTS",
    "ACCESS_MIN_AVERAGE",
    "ACCESS_MIN_COMPLETION",
    "clamp_score",
    "average_of_four",
    "qualitative_label",
    "missing_elements",
    "follow_up_question",
    "meets_access_threshold",
    "session_meets_access_threshold",
    "normalize_scores",
    "session_average",
]

from __future__ import annotations  # LLM-backed answer coaching and session summary

from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

from config import LlmRoute, bind_model, load_app_registry
from config.registry import COACH_KEY, SUMMARY_KEY
from llm_gateway import UsageHook, chat

from .models import CoachingResult, ScoredItem, SessionSummary


COACH_GUIDANCE = dedent(  # Guardrails shared by both coaching prompts
    """
    You are a supportive interview coach helping job seekers improve answers with the STAR
    framework (Situation, Task, Action, Result).
    Never fabricate facts, experiences, or details the user did not mention.
    Base all feedback only on what the user actually said.
    Be encouraging and specific; focus on growth rather than criticism.
    """
).strip()


def coach_answer(
    question: str,
    answer: str,
    category: str,
    *,
    route: LlmRoute,
    job_description: Optional[str] = None,
    usage_hook: Optional[UsageHook] = None,
) -> CoachingResult:  # Score one answer and draft feedback
    messages = [
        {"role": "system", "content": COACH_GUIDANCE},
        {"role": "user", "content": _answer_task(question, answer, category, job_description)},
    ]
    return chat(messages, CoachingResult, cfg=route, usage_hook=usage_hook)


def summarize_session(
    items: Sequence[ScoredItem],
    *,
    route: LlmRoute,
    job_description: Optional[str] = None,
    usage_hook: Optional[UsageHook] = None,
) -> SessionSummary:  # Synthesize strengths and clarifications across answers
    messages = [
        {"role": "system", "content": COACH_GUIDANCE},
        {"role": "user", "content": _summary_task(items, job_description)},
    ]
    return chat(messages, SessionSummary, cfg=route, usage_hook=usage_hook)


def bind_with_config(config_path: Path, *, usage_hook: Optional[UsageHook] = None) -> None:
    """Bind the coaching registry keys to routes from the app config."""

    registry = load_app_registry(
        config_path,
        {COACH_KEY: CoachingResult, SUMMARY_KEY: SessionSummary},
    )
    coach_route, _ = registry[COACH_KEY]
    summary_route, _ = registry[SUMMARY_KEY]

    def _coach(*, question: str, answer: str, category: str, job_description: Optional[str] = None) -> CoachingResult:
        return coach_answer(
            question,
            answer,
            category,
            route=coach_route,
            job_description=job_description,
            usage_hook=usage_hook,
        )

    def _summarize(*, items: Sequence[ScoredItem], job_description: Optional[str] = None) -> SessionSummary:
        return summarize_session(
            items,
            route=summary_route,
            job_description=job_description,
            usage_hook=usage_hook,
        )

    bind_model(COACH_KEY, _coach)
    bind_model(SUMMARY_KEY, _summarize)


def _answer_task(question: str, answer: str, category: str, job_description: Optional[str]) -> str:  # Compose per-answer prompt
    context = f"Job description context:\n{job_description}\n\n" if job_description else ""
    return dedent(
        f"""
        Question category: {category}
        Question: {question}

        User's answer:
        {answer}

        {context}Evaluate the answer and return JSON with:
        - star_scores: situation, task, action, result, each 1-5.
        - specificity_tag: "specific", "vague", or "unclear".
        - impact_tag: "high_impact", "medium_impact", or "low_impact".
        - clarity_tag: "clear", "rambling", or "incomplete".
        - honesty_flag: true only if the answer contradicts the provided context.
        - narrative: 2-3 sentences on what is strong and what could be clearer.
        - example_answer: a rewrite using only facts from the original answer, marking missing
          STAR details with placeholders such as [specific example here].
        """
    ).strip()


def _summary_task(items: Sequence[ScoredItem], job_description: Optional[str]) -> str:  # Compose session summary prompt
    blocks = "\n\n".join(
        f"Q{index}: {item.question_text}\nA{index}: {item.answer_text}\nCoaching: {item.coaching.narrative}"
        for index, item in enumerate(items, start=1)
    )
    context = f"Job description context:\n{job_description}\n\n" if job_description else ""
    return dedent(
        f"""
        Review this practice session:

        {blocks}

        {context}Return JSON with:
        - strengths: exactly 3 items with text and evidence (name the question it came from).
        - clarifications: exactly 3 items with suggestion and rationale, each actionable for a
          resume or cover letter and tied to a specific answer.
        """
    ).strip()


__all__ = ["COACH_GUIDANCE", "coach_answer", "summarize_session", "bind_with_config"]

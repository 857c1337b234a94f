"""Question provisioning from the soft-skill bank."""
from __future__ import annotations

import logging
import random
import sqlite3
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel

from config.settings import settings
from observability import log_event
from storage.questions import QuestionPayload, QuestionRecord, insert_questions, list_questions

from .access import load_authorized_session

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = Path(__file__).resolve().parents[1] / "config" / "question_bank.yaml"


class BankItem(BaseModel):
    text: str
    category: str
    gentle: bool = False


@lru_cache(maxsize=4)
def _load_bank(path: str) -> tuple[BankItem, ...]:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return tuple(BankItem(**item) for item in data.get("questions", []))


def question_bank() -> List[BankItem]:
    return list(_load_bank(settings.QUESTION_BANK_PATH or str(DEFAULT_BANK_PATH)))


def select_questions(
    count: int,
    gentle: bool,
    *,
    bank: Optional[List[BankItem]] = None,
    rng: Optional[random.Random] = None,
) -> List[BankItem]:
    """Shuffle the candidate pool and take up to ``count`` items without replacement."""

    if count <= 0:
        return []
    pool = bank if bank is not None else question_bank()
    if gentle:
        pool = [item for item in pool if item.gentle]
    shuffled = list(pool)
    (rng or random).shuffle(shuffled)
    return shuffled[: min(count, len(shuffled))]


def ensure_questions(
    session_id: str,
    caller: Optional[str],
    *,
    rng: Optional[random.Random] = None,
) -> List[QuestionRecord]:
    """Return the session's question set, generating it on first request."""

    session = load_authorized_session(session_id, caller)
    existing = list_questions(session.id)
    if existing:
        return existing

    count = settings.GENTLE_QUESTION_COUNT if session.low_anxiety_enabled else session.question_count
    selected = select_questions(count, session.low_anxiety_enabled, rng=rng)
    if not selected:
        logger.warning("Question bank produced no questions for session %s", session.id)
        return []
    payloads = [
        QuestionPayload(
            question_order=index,
            question_text=item.text,
            category=item.category,
            is_tailored=False,
            is_gentle=item.gentle,
        )
        for index, item in enumerate(selected, start=1)
    ]
    try:
        stored = insert_questions(session.id, payloads)
    except sqlite3.IntegrityError:
        # A concurrent request stored its set first; serve that one.
        logger.info("Question set for session %s already provisioned concurrently", session.id)
        return list_questions(session.id)
    log_event("questions_provisioned", session.id, outcome=len(stored))
    return stored


__all__ = ["BankItem", "question_bank", "select_questions", "ensure_questions"]

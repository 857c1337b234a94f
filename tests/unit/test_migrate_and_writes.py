"""Tests for the SQLite migration and write helpers."""
from __future__ import annotations

import datetime as dt
import os
import sqlite3
import tempfile

import pytest

from session_reports.models import Clarification, FeedbackScores, QuestionFeedback, Strength
from storage.migrate import migrate
from storage.questions import QuestionPayload, insert_questions
from storage.reports import claim_generation, get_report, release_generation, upsert_report
from storage.sessions import insert_session, mark_completed, read_draft, write_draft

STARTED = "2026-03-10T09:00:00+00:00"


def _session(**overrides):
    data = dict(user_id=None, mode="text", question_count=3, started_at=STARTED)
    data.update(overrides)
    return insert_session(**data)


def _feedback(question_id: str) -> QuestionFeedback:
    return QuestionFeedback(
        question_id=question_id,
        question_order=1,
        question_text="Q",
        narrative="N",
        example_answer="E",
        scores=FeedbackScores(
            situation=3, task=3, action=3, result=3,
            specificity_tag="specific", impact_tag="low_impact", clarity_tag="clear",
        ),
        average=3.0,
        label="Adequate",
    )


def test_migrate_is_idempotent():
    with tempfile.TemporaryDirectory() as td:
        db_path = os.path.join(td, "nested", "test.db")
        migrate(db_path)
        migrate(db_path)
        conn = sqlite3.connect(db_path)
        try:
            tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        finally:
            conn.close()
    assert {
        "sessions",
        "questions",
        "answers",
        "reports",
        "coaching_locks",
        "cost_records",
        "system_config",
        "audit_logs",
        "events",
    } <= tables


def test_gentle_sessions_must_have_three_questions():
    with pytest.raises(sqlite3.IntegrityError):
        _session(low_anxiety_enabled=True, question_count=5)


def test_question_order_is_unique_per_session():
    session = _session()
    items = [QuestionPayload(question_order=1, question_text="A", category="soft_skills_conflict")]
    insert_questions(session.id, items)
    with pytest.raises(sqlite3.IntegrityError):
        insert_questions(session.id, items)


def test_draft_round_trip_and_clear():
    session = _session()
    write_draft(session.id, {"currentIndex": 2})
    assert read_draft(session.id) == {"currentIndex": 2}
    write_draft(session.id, None)
    assert read_draft(session.id) is None


def test_report_upsert_keeps_id():
    session = _session()
    mark_completed(session.id, avg_score=3.0, completed_at=dt.datetime.now(dt.timezone.utc).isoformat())
    first = upsert_report(
        session.id,
        strengths=[Strength(text="S", evidence="E")],
        clarifications=[],
        feedback=[_feedback("q1")],
    )
    second = upsert_report(
        session.id,
        strengths=[],
        clarifications=[Clarification(suggestion="C", rationale="R")],
        feedback=[],
    )
    assert first == second
    report = get_report(first)
    assert report.strengths == []
    assert report.clarifications[0].suggestion == "C"
    assert report.avg_score == 3.0


def test_generation_lock_claim_and_release():
    session = _session()
    token = claim_generation(session.id, ttl_seconds=600)
    assert token is not None
    assert claim_generation(session.id, ttl_seconds=600) is None
    release_generation(session.id, token)
    assert claim_generation(session.id, ttl_seconds=600) is not None


def test_release_after_reclaim_keeps_new_holder():
    session = _session()
    stale = claim_generation(session.id, ttl_seconds=600)
    fresh = claim_generation(session.id, ttl_seconds=-1)
    assert fresh is not None and fresh != stale

    release_generation(session.id, stale)
    assert claim_generation(session.id, ttl_seconds=600) is None

    release_generation(session.id, fresh)
    assert claim_generation(session.id, ttl_seconds=600) is not None

import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from config.registry import bind_model, COACH_KEY, SUMMARY_KEY


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "EVENTS_ASYNC", False, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


def coaching_reply(situation=4, task=4, action=5, result=4, **overrides):
    reply = {
        "star_scores": {"situation": situation, "task": task, "action": action, "result": result},
        "specificity_tag": "specific",
        "impact_tag": "high_impact",
        "clarity_tag": "clear",
        "honesty_flag": False,
        "narrative": "Clear ownership of the problem and a concrete outcome.",
        "example_answer": "In my last role I led the migration and cut costs by 20%.",
    }
    reply.update(overrides)
    return reply


def summary_reply(**_):
    return {
        "strengths": [
            {"text": "Owns outcomes", "evidence": "Described leading the migration end to end."},
        ],
        "clarifications": [
            {"suggestion": "Quantify team size", "rationale": "Reviewers look for scope of leadership."},
        ],
    }


@pytest.fixture
def fake_models():
    bind_model(COACH_KEY, lambda **_: coaching_reply())
    bind_model(SUMMARY_KEY, summary_reply)
    return True

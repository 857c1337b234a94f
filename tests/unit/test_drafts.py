import pytest
from pydantic import ValidationError as SchemaError

from services.drafts import DraftState, clear_draft, load_draft, save_draft
from services.errors import Unauthorized
from services.sessions import SessionConfig, create_session


def test_save_overwrites_and_stamps():
    created = create_session(SessionConfig(mode="text", question_count=3), None)
    assert load_draft(created.session_id, None) is None

    first = save_draft(created.session_id, None, DraftState(currentIndex=1, mode="text"))
    assert "updatedAt" in first

    save_draft(
        created.session_id,
        None,
        DraftState(currentQuestionId="q2", answers={"q1": {"text": "partial", "isFinal": False}}),
    )
    draft = load_draft(created.session_id, None)
    assert draft["currentQuestionId"] == "q2"
    assert draft["answers"] == {"q1": {"text": "partial", "isFinal": False}}
    # No merge with the previous snapshot.
    assert "currentIndex" not in draft


def test_clear_draft():
    created = create_session(SessionConfig(mode="text", question_count=3), "u1")
    save_draft(created.session_id, "u1", DraftState(currentIndex=0))
    clear_draft(created.session_id, "u1")
    assert load_draft(created.session_id, "u1") is None


def test_draft_requires_owner():
    created = create_session(SessionConfig(mode="text", question_count=3), "u1")
    with pytest.raises(Unauthorized):
        save_draft(created.session_id, "u2", DraftState())


def test_draft_shape_is_bounded():
    with pytest.raises(SchemaError):
        DraftState(currentIndex=-1)
    with pytest.raises(SchemaError):
        DraftState(answers={"q1": {"durationSeconds": 241}})

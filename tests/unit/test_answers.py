import pytest

from services.answers import AnswerMetadata, submit_answer
from services.errors import Conflict, NotFound, Unauthorized, ValidationError
from services.questions import ensure_questions
from services.sessions import SessionConfig, create_session
from storage.answers import AnswerExists, insert_answer
from storage.events import list_events
from storage.sessions import get_session

ANSWER = "I led the incident review and we cut repeat outages by half."


def _session(mode="text", count=4, caller=None):
    created = create_session(SessionConfig(mode=mode, question_count=count), caller)
    questions = ensure_questions(created.session_id, caller)
    return created.session_id, questions


def test_submit_updates_completion_rate():
    session_id, questions = _session(count=4)
    submit_answer(session_id, questions[0].id, ANSWER, None, None)
    assert get_session(session_id).completion_rate == 0.25
    submit_answer(session_id, questions[1].id, ANSWER, AnswerMetadata(duration_seconds=90), None)
    assert get_session(session_id).completion_rate == 0.5

    events = [e for e in list_events(session_id) if e["event_type"] == "q_answered"]
    assert len(events) == 2


@pytest.mark.parametrize("text", ["too short", "x" * 5001])
def test_text_length_bounds(text):
    session_id, questions = _session()
    with pytest.raises(ValidationError):
        submit_answer(session_id, questions[0].id, text, None, None)


def test_duration_capped_even_with_extension():
    session_id, questions = _session(mode="audio")
    with pytest.raises(ValidationError):
        submit_answer(session_id, questions[0].id, ANSWER, AnswerMetadata(duration_seconds=211), None)
    with pytest.raises(ValidationError):
        submit_answer(session_id, questions[0].id, ANSWER, AnswerMetadata(duration_seconds=0), None)
    with pytest.raises(ValidationError):
        submit_answer(
            session_id,
            questions[0].id,
            ANSWER,
            AnswerMetadata(duration_seconds=240, extension_used=True),
            None,
        )
    submit_answer(
        session_id,
        questions[0].id,
        ANSWER,
        AnswerMetadata(duration_seconds=210, extension_used=True),
        None,
    )


def test_retake_flags_rejected_for_text_sessions():
    session_id, questions = _session(mode="text")
    with pytest.raises(ValidationError):
        submit_answer(session_id, questions[0].id, ANSWER, AnswerMetadata(retake_used=True), None)


def test_second_answer_conflicts():
    session_id, questions = _session()
    submit_answer(session_id, questions[0].id, ANSWER, None, None)
    with pytest.raises(Conflict):
        submit_answer(session_id, questions[0].id, ANSWER, None, None)


def test_storage_uniqueness_is_authoritative():
    session_id, questions = _session()
    insert_answer(session_id=session_id, question_id=questions[0].id, transcript_text=ANSWER)
    with pytest.raises(AnswerExists):
        insert_answer(session_id=session_id, question_id=questions[0].id, transcript_text=ANSWER)


def test_foreign_question_and_missing_session():
    session_id, _ = _session()
    _, other_questions = _session()
    with pytest.raises(NotFound):
        submit_answer(session_id, other_questions[0].id, ANSWER, None, None)
    with pytest.raises(NotFound):
        submit_answer("missing", other_questions[0].id, ANSWER, None, None)


def test_owned_session_rejects_other_callers():
    session_id, questions = _session(caller="owner")
    with pytest.raises(Unauthorized):
        submit_answer(session_id, questions[0].id, ANSWER, None, "intruder")
    submit_answer(session_id, questions[0].id, ANSWER, None, "owner")


def test_completion_rate_never_exceeds_one():
    session_id, questions = _session(count=3)
    for question in questions:
        submit_answer(session_id, question.id, ANSWER, None, None)
    assert get_session(session_id).completion_rate == 1.0

import random

import pytest

from services.errors import NotFound, Unauthorized
from services.questions import BankItem, ensure_questions, question_bank, select_questions
from services.sessions import SessionConfig, create_session
from storage.questions import list_questions


def _bank(n_regular=4, n_gentle=2):
    items = [BankItem(text=f"Regular {i}", category="soft_skills_conflict") for i in range(n_regular)]
    items += [BankItem(text=f"Gentle {i}", category="soft_skills_failure", gentle=True) for i in range(n_gentle)]
    return items


def test_bank_ships_six_categories_and_gentle_pool():
    bank = question_bank()
    assert len(bank) == 18
    assert len({item.category for item in bank}) == 6
    assert sum(item.gentle for item in bank) == 6


def test_select_without_replacement():
    picked = select_questions(4, False, bank=_bank(), rng=random.Random(7))
    assert len(picked) == 4
    assert len({item.text for item in picked}) == 4


def test_select_gentle_pool_only():
    picked = select_questions(3, True, bank=_bank(), rng=random.Random(1))
    assert [item.gentle for item in picked] == [True, True]


@pytest.mark.parametrize("count", [0, -2])
def test_select_non_positive_count(count):
    assert select_questions(count, False, bank=_bank()) == []


def test_ensure_questions_is_idempotent():
    created = create_session(SessionConfig(mode="text", question_count=5), None)
    first = ensure_questions(created.session_id, None, rng=random.Random(3))
    assert [q.question_order for q in first] == [1, 2, 3, 4, 5]

    second = ensure_questions(created.session_id, None)
    assert [q.id for q in second] == [q.id for q in first]
    assert len(list_questions(created.session_id)) == 5


def test_gentle_session_gets_three_gentle_questions():
    created = create_session(SessionConfig(mode="audio", question_count=3, low_anxiety_enabled=True), None)
    questions = ensure_questions(created.session_id, None)
    assert len(questions) == 3
    assert all(q.is_gentle for q in questions)


def test_ensure_questions_authorization():
    created = create_session(SessionConfig(mode="text", question_count=3), "owner")
    with pytest.raises(Unauthorized):
        ensure_questions(created.session_id, "someone-else")
    with pytest.raises(Unauthorized):
        ensure_questions(created.session_id, None)
    with pytest.raises(NotFound):
        ensure_questions("missing", "owner")
    assert len(ensure_questions(created.session_id, "owner")) == 3

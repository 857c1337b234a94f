from session_reports import (
    Clarification,
    CoachingReport,
    FeedbackScores,
    QuestionFeedback,
    Strength,
    generate_coaching_report_pdf,
)


def _report(**overrides):
    data = dict(
        id="r1",
        session_id="s1",
        strengths=[Strength(text="Calm under pressure", evidence="Q2 outage story")],
        clarifications=[Clarification(suggestion="Add team size", rationale="Shows scope")],
        per_question_feedback=[
            QuestionFeedback(
                question_id="q1",
                question_order=1,
                question_text="Tell me about a time you failed.",
                narrative="Honest reflection with a clear lesson learned.",
                example_answer="When our launch slipped, I [specific example here]…",
                scores=FeedbackScores(
                    situation=4,
                    task=3,
                    action=2,
                    result=4,
                    specificity_tag="vague",
                    impact_tag="medium_impact",
                    clarity_tag="clear",
                ),
                average=3.25,
                label="Adequate",
                missing_elements=["Action"],
            )
        ],
        created_at="2026-03-10T10:00:00+00:00",
        updated_at="2026-03-10T10:05:00Z",
        avg_score=3.25,
        low_anxiety_enabled=True,
    )
    data.update(overrides)
    return CoachingReport(**data)


def test_pdf_renders_report():
    payload = generate_coaching_report_pdf(_report())
    assert payload.startswith(b"%PDF")
    assert len(payload) > 1000


def test_pdf_renders_empty_sections():
    payload = generate_coaching_report_pdf(
        _report(strengths=[], clarifications=[], per_question_feedback=[], avg_score=None)
    )
    assert payload.startswith(b"%PDF")

import json

import pytest

from config import LlmRoute
from llm_gateway import LlmGatewayError, chat
from coaching_agent import CoachingResult, coach_answer


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    @property
    def text(self):
        return json.dumps(self._payload)


class FakeClient:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers})
        return self.responses.pop(0)


def _completion(content, usage=None):
    payload = {"choices": [{"message": {"content": content}}]}
    if usage is not None:
        payload["usage"] = usage
    return FakeResponse(200, payload)


SCORE_MESSAGES = [{"role": "user", "content": "Score this answer"}]

ROUTE = LlmRoute(
    name="fake",
    base_url="http://llm.local",
    endpoint="/v1/chat/completions",
    model="fake-model",
    timeout_s=5,
    max_retries=1,
    response_format="json_object",
    temperature=0.7,
)

COACHING_JSON = json.dumps(
    {
        "star_scores": {"situation": 4, "task": 3.6, "action": 5, "result": 4},
        "specificity_tag": "specific",
        "impact_tag": "medium_impact",
        "clarity_tag": "clear",
        "honesty_flag": False,
        "narrative": "Good structure.",
        "example_answer": "Better answer.",
    }
)


def test_coach_answer_parses_and_reports_usage():
    seen = []
    client = FakeClient(_completion(COACHING_JSON, {"prompt_tokens": 120, "completion_tokens": 80, "total_tokens": 200}))
    result = chat(
        SCORE_MESSAGES,
        CoachingResult,
        cfg=ROUTE,
        client=client,
        usage_hook=lambda route, usage: seen.append((route.name, usage.total_tokens)),
    )
    assert result.star_scores.task == 3.6
    assert seen == [("fake", 200)]

    body = client.requests[0]["json"]
    assert body["model"] == "fake-model"
    assert body["temperature"] == 0.7
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0]["role"] == "system"


def test_invalid_output_is_retried_and_billed():
    seen = []
    usage = {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
    client = FakeClient(_completion("not json", usage), _completion(COACHING_JSON, usage))
    result = chat(
        SCORE_MESSAGES,
        CoachingResult,
        cfg=ROUTE,
        client=client,
        usage_hook=lambda route, u: seen.append(u.total_tokens),
    )
    assert result.impact_tag == "medium_impact"
    assert seen == [15, 15]
    assert "failed validation" in client.requests[1]["json"]["messages"][-1]["content"]


def test_error_status_raises():
    client = FakeClient(FakeResponse(503, {"error": "overloaded"}))
    with pytest.raises(LlmGatewayError):
        chat(SCORE_MESSAGES, CoachingResult, cfg=ROUTE, client=client)


def test_exhausted_retries_raise():
    client = FakeClient(_completion("{}"), _completion("```json\n{}\n```"))
    with pytest.raises(LlmGatewayError):
        chat(SCORE_MESSAGES, CoachingResult, cfg=ROUTE, client=client)


def test_overflowing_scores_fail_validation():
    overflow = COACHING_JSON.replace('"situation": 4', '"situation": 1e400')
    assert "1e400" in overflow
    client = FakeClient(_completion(overflow), _completion(overflow))
    with pytest.raises(LlmGatewayError):
        chat(SCORE_MESSAGES, CoachingResult, cfg=ROUTE, client=client)
    assert len(client.requests) == 2


def test_coach_answer_includes_job_description(monkeypatch):
    import coaching_agent.coach as coach

    captured = {}

    def fake_chat(messages, schema, **kwargs):
        captured["task"] = messages[-1]["content"]
        return CoachingResult.model_validate_json(COACHING_JSON)

    monkeypatch.setattr(coach, "chat", fake_chat)
    coach_answer("Tell me about a conflict", "My answer", "soft_skills_conflict", route=ROUTE, job_description="Staff PM")
    assert "Staff PM" in captured["task"]
    assert "Tell me about a conflict" in captured["task"]

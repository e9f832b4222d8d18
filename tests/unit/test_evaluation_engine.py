from __future__ import annotations

import base64
import json

import httpx
import pytest

from config import ProviderRoute
from interview_evaluation import (
    EvaluationEngine,
    EvaluationParseError,
    PayloadTooLargeError,
    ProviderUnavailableError,
    as_evaluator,
    parse_evaluation,
)

ROUTE = ProviderRoute(
    name="video",
    base_url="https://provider.test",
    endpoint="/v1beta/models/{model}:generateContent",
    model="m-1",
    timeout_s=5.0,
    api_key_env="TEST_PROVIDER_KEY",
)

VALID = {
    "transcript": "I'm a paramedic relocating for a new job; my budget is 900 a month.",
    "score": 78,
    "score_explanation": "Good detail on work and budget.",
    "breakdown": {"length": 14, "keywords": 18, "language": 20, "sentiment": 16, "completeness": 10},
    "suggestions": ["Mention references you can share."],
}


class _Response:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class _Client:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def _reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_evaluate_posts_inline_recording(monkeypatch):
    monkeypatch.setenv("TEST_PROVIDER_KEY", "secret")
    client = _Client(_Response(payload=_reply(json.dumps(VALID))))
    engine = EvaluationEngine(ROUTE, client=client)

    result = engine.evaluate(b"\x00video", "video/webm", interview_id="interview_t1_1", subject_id="t1")

    assert result.score == 78
    assert result.breakdown["keywords"] == 18
    request = client.requests[0]
    assert request["url"] == "https://provider.test/v1beta/models/m-1:generateContent"
    assert request["headers"]["x-goog-api-key"] == "secret"
    parts = request["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"] == {
        "mime_type": "video/webm",
        "data": base64.b64encode(b"\x00video").decode("ascii"),
    }
    assert "interview=interview_t1_1" in parts[1]["text"]


def test_code_fenced_reply_is_accepted():
    fenced = "```json\n" + json.dumps(VALID) + "\n```"
    engine = EvaluationEngine(ROUTE, client=_Client(_Response(payload=_reply(fenced))))
    assert engine.evaluate(b"v", "video/webm").score == 78


@pytest.mark.parametrize("raw, expected", [(135, 100), (-12, 0), (64.6, 65)])
def test_scores_are_clamped(raw, expected):
    result = parse_evaluation(json.dumps({**VALID, "score": raw, "breakdown": {"length": raw}}))
    assert result.score == expected
    assert result.breakdown == {"length": expected}


@pytest.mark.parametrize("missing", ["transcript", "score", "score_explanation", "breakdown", "suggestions"])
def test_missing_fields_fail(missing):
    payload = {key: value for key, value in VALID.items() if key != missing}
    with pytest.raises(EvaluationParseError) as excinfo:
        parse_evaluation(json.dumps(payload))
    assert missing in str(excinfo.value)


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        json.dumps([VALID]),
        json.dumps({**VALID, "score": "excellent"}),
        json.dumps({**VALID, "score": "85"}),
        json.dumps({**VALID, "breakdown": {"length": "16"}}),
        json.dumps({**VALID, "score": True}),
        json.dumps({**VALID, "transcript": "   "}),
        json.dumps({**VALID, "breakdown": {}}),
        '{"transcript": "x", "score": NaN, "score_explanation": "", "breakdown": {"a": 1}, "suggestions": []}',
    ],
)
def test_malformed_content_fails(content):
    with pytest.raises(EvaluationParseError):
        parse_evaluation(content)


def test_oversized_recording_is_rejected_before_sending():
    client = _Client(_Response(payload=_reply(json.dumps(VALID))))
    engine = EvaluationEngine(ROUTE, client=client, max_recording_bytes=4)

    with pytest.raises(PayloadTooLargeError):
        engine.evaluate(b"12345", "video/webm")
    assert client.requests == []


def test_provider_413_maps_to_payload_too_large():
    engine = EvaluationEngine(ROUTE, client=_Client(_Response(status_code=413, text="too large")))
    with pytest.raises(PayloadTooLargeError):
        engine.evaluate(b"v", "video/webm")


@pytest.mark.parametrize("status", [429, 500, 503, 400])
def test_error_statuses_map_to_provider_unavailable(status):
    engine = EvaluationEngine(ROUTE, client=_Client(_Response(status_code=status, text="err")))
    with pytest.raises(ProviderUnavailableError):
        engine.evaluate(b"v", "video/webm")


def test_transport_failure_maps_to_provider_unavailable():
    engine = EvaluationEngine(ROUTE, client=_Client(error=httpx.ConnectError("refused")))
    with pytest.raises(ProviderUnavailableError) as excinfo:
        engine.evaluate(b"v", "video/webm")
    assert excinfo.value.transient is True


@pytest.mark.parametrize(
    "response",
    [
        _Response(payload=None, text="<html>"),
        _Response(payload={"candidates": []}),
        _Response(payload={"promptFeedback": {"blockReason": "SAFETY"}}),
    ],
)
def test_malformed_provider_body_maps_to_parse_error(response):
    engine = EvaluationEngine(ROUTE, client=_Client(response))
    with pytest.raises(EvaluationParseError):
        engine.evaluate(b"v", "video/webm")


def test_as_evaluator_parses_raw_model_output():
    evaluate = as_evaluator(lambda recording, media_type, **_: {**VALID, "score": 140})
    assert evaluate(b"v", "video/webm", interview_id="x").score == 100

    broken = as_evaluator(lambda *_args, **_kwargs: {"score": 10})
    with pytest.raises(EvaluationParseError):
        broken(b"v", "video/webm")

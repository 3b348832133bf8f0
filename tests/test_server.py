from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from src.ai.config import GatewaySettings
from src.ai.gateway_client import EmotionGatewayClient
from src.server.app import ANALYZE_PATH, create_app

SETTINGS = GatewaySettings(api_key="test-key", model="test/model")
ANGER = '{"emotion":"Anger","confidence":0.8,"explanation":"Sharp language.","emoji":"😠","color":"red-500"}'


class _FakeOpenAI:
    """chat.completions.create 만 흉내. result가 예외면 raise."""

    def __init__(self, result: Any):
        self.result = result
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        if isinstance(self.result, Exception):
            raise self.result
        message = SimpleNamespace(content=self.result, tool_calls=None)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _status_error(status: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://gateway.test/v1/chat/completions")
    return openai.APIStatusError("upstream", response=httpx.Response(status, request=request), body=None)


def _test_client(result: Any) -> TestClient:
    gateway = EmotionGatewayClient(SETTINGS, client=_FakeOpenAI(result))
    return TestClient(create_app(settings=SETTINGS, client=gateway))


def test_analyze_returns_normalized_result() -> None:
    with _test_client("Here is the result: " + ANGER + " Hope that helps!") as client:
        res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "Why would you do that?!"})
        assert res.status_code == 200
        assert res.json() == {
            "emotion": "Anger",
            "confidence": 0.8,
            "explanation": "Sharp language.",
            "emoji": "😠",
            "color": "red-500",
        }


def test_non_finite_extra_field_is_dropped_not_500() -> None:
    raw = '{"emotion":"Joy","confidence":0.9,"explanation":"x","emoji":"a","color":"c","score":NaN}'
    with _test_client(raw) as client:
        res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hello"})
        assert res.status_code == 200
        assert res.json() == {"emotion": "Joy", "confidence": 0.9, "explanation": "x", "emoji": "a", "color": "c"}


def test_truncated_emoji_surrogate_is_replaced_not_500() -> None:
    raw = '{"emotion":"Joy","confidence":0.9,"explanation":"x","emoji":"\\ud83d","color":"c","note":"\\udc00"}'
    with _test_client(raw) as client:
        res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hello"})
        assert res.status_code == 200
        body = res.json()
        assert body["emotion"] == "Joy"
        assert body["emoji"] == "😐"
        assert "note" not in body


def test_unparseable_model_output_is_still_200_and_counted() -> None:
    with _test_client("I cannot determine the emotion.") as client:
        res = client.post(ANALYZE_PATH, json={"mode": "VOICE", "input": "well I guess it went okay"})
        assert res.status_code == 200
        assert res.json()["emotion"] == "Neutral"
        assert res.json()["confidence"] == 0.0

        client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "again"})
        stats = client.get("/api/stats").json()
        assert stats == {"total": 2, "fallback": 2, "fallback_rate": 1.0}


def test_stats_start_empty() -> None:
    with _test_client(ANGER) as client:
        assert client.get("/api/stats").json() == {"total": 0, "fallback": 0, "fallback_rate": 0.0}
        client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hi"})
        assert client.get("/api/stats").json()["fallback_rate"] == 0.0


@pytest.mark.parametrize(
    ("status", "message"),
    [
        (429, "Rate limit exceeded. Please try again later."),
        (402, "Payment required. Please add credits to continue."),
    ],
)
def test_rate_and_payment_errors_pass_through(status: int, message: str) -> None:
    with _test_client(_status_error(status)) as client:
        res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hello"})
        assert res.status_code == status
        assert res.json() == {"error": message}


def test_other_upstream_status_becomes_500() -> None:
    with _test_client(_status_error(503)) as client:
        res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hello"})
        assert res.status_code == 500
        assert res.json() == {"error": "AI gateway error: 503"}


def test_missing_api_key_is_500_per_request() -> None:
    with TestClient(create_app(settings=GatewaySettings(api_key=""))) as client:
        for _ in range(2):
            res = client.post(ANALYZE_PATH, json={"mode": "TEXT", "input": "hello"})
            assert res.status_code == 500
            assert res.json() == {"error": "EMOTION_GATEWAY_API_KEY is not configured"}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"content": "not json", "headers": {"Content-Type": "application/json"}},
        {"content": b"", "headers": {"Content-Type": "application/json"}},
        {"json": ["TEXT", "hello"]},
        {"json": {"mode": "TEXT"}},
        {"json": {"mode": "SMELL", "input": "roses"}},
        {"json": {"mode": "TEXT", "input": "   "}},
        {"json": {"mode": "WEBCAM", "input": "not-a-data-url"}},
    ],
)
def test_malformed_requests_are_500_with_error(kwargs: dict) -> None:
    with _test_client(ANGER) as client:
        res = client.post(ANALYZE_PATH, **kwargs)
        assert res.status_code == 500
        assert isinstance(res.json()["error"], str)
        assert res.json()["error"]


def test_webcam_snapshot_is_accepted() -> None:
    with _test_client(ANGER) as client:
        res = client.post(ANALYZE_PATH, json={"mode": "WEBCAM", "input": "data:image/jpeg;base64,/9j/4AAQ"})
        assert res.status_code == 200
        assert res.json()["emotion"] == "Anger"


def test_plain_options_returns_empty_200() -> None:
    with _test_client(ANGER) as client:
        res = client.options(ANALYZE_PATH)
        assert res.status_code == 200
        assert res.content == b""


def test_cors_preflight_is_permissive() -> None:
    with _test_client(ANGER) as client:
        res = client.options(
            ANALYZE_PATH,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type, apikey, x-client-info",
            },
        )
        assert res.status_code == 200
        assert res.headers["access-control-allow-origin"] == "*"
        assert "POST" in res.headers["access-control-allow-methods"]
        assert res.content == b""


def test_cors_preflight_accepts_any_requested_header() -> None:
    with _test_client(ANGER) as client:
        res = client.options(
            ANALYZE_PATH,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, x-trace-id",
            },
        )
        assert res.status_code == 200
        assert res.content == b""
        assert "x-trace-id" in res.headers["access-control-allow-headers"].lower()


def test_cors_headers_on_error_responses() -> None:
    with _test_client(_status_error(429)) as client:
        res = client.post(
            ANALYZE_PATH,
            json={"mode": "TEXT", "input": "hello"},
            headers={"Origin": "https://app.example.com"},
        )
        assert res.status_code == 429
        assert res.headers["access-control-allow-origin"] == "*"


def test_index_page_is_served() -> None:
    with _test_client(ANGER) as client:
        res = client.get("/")
        assert res.status_code == 200
        assert "text/html" in res.headers["content-type"]
        assert "Emotion Analyzer" in res.text
        assert ANALYZE_PATH in res.text

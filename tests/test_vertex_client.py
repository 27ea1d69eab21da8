import asyncio
import json

import httpx
import pytest

from llm.vertex_client import StaticTokenProvider, VertexAIClient
from utils.config import VertexSettings
from utils.errors import ConfigurationError, UpstreamError


def candidate_reply(text):
    return {
        "candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}],
        "promptFeedback": {"safetyRatings": []}
    }


@pytest.fixture(autouse=True)
def vertex_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "study-project")
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/secrets/service-account.json")
    monkeypatch.delenv("GOOGLE_CLOUD_LOCATION", raising=False)
    monkeypatch.delenv("VERTEX_MODEL_ID", raising=False)
    monkeypatch.delenv("VERTEX_TIMEOUT_SECONDS", raising=False)


def make_client(handler):
    return VertexAIClient(
        token_provider=StaticTokenProvider("test-token"),
        transport=httpx.MockTransport(handler)
    )


def test_generate_sends_prompt_and_returns_first_text():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        reply = candidate_reply("first")
        reply["candidates"].append({"content": {"parts": [{"text": "second"}]}})
        return httpx.Response(200, json=reply)

    text = asyncio.run(make_client(handler).generate("Explain osmosis"))

    assert text == "first"
    assert seen["auth"] == "Bearer test-token"
    assert seen["body"] == {"contents": {"role": "user", "parts": [{"text": "Explain osmosis"}]}}
    assert seen["url"] == (
        "https://us-central1-aiplatform.googleapis.com/v1/projects/study-project/locations/us-central1"
        "/publishers/google/models/gemini-1.5-flash-002:generateContent"
    )


def test_location_and_model_come_from_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_LOCATION", "europe-west4")
    monkeypatch.setenv("VERTEX_MODEL_ID", "gemini-1.5-pro-002")
    settings = VertexSettings.from_env()
    assert settings.endpoint.startswith("https://europe-west4-aiplatform.googleapis.com/")
    assert settings.endpoint.endswith("/models/gemini-1.5-pro-002:generateContent")


def test_missing_project_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT")
    calls = []
    client = make_client(lambda request: calls.append(request) or httpx.Response(200, json=candidate_reply("x")))

    with pytest.raises(ConfigurationError, match="GOOGLE_CLOUD_PROJECT"):
        asyncio.run(client.generate("hi"))
    assert calls == []


def test_missing_credentials_path_is_a_configuration_error(monkeypatch):
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS")
    with pytest.raises(ConfigurationError, match="GOOGLE_APPLICATION_CREDENTIALS"):
        asyncio.run(VertexAIClient().generate("hi"))


def test_unreadable_credentials_file_is_a_configuration_error(tmp_path, monkeypatch):
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(tmp_path / "missing.json"))
    with pytest.raises(ConfigurationError, match="service account credentials"):
        asyncio.run(VertexAIClient().generate("hi"))


def test_error_status_is_an_upstream_error():
    def handler(request):
        return httpx.Response(429, json={"error": {"code": 429, "status": "RESOURCE_EXHAUSTED"}})

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(make_client(handler).generate("hi"))

    assert exc_info.value.upstream_status == 429
    assert exc_info.value.rate_limited
    assert "Vertex AI API error: 429" in str(exc_info.value)


def test_server_error_is_not_rate_limited():
    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(make_client(lambda request: httpx.Response(500, text="internal")).generate("hi"))
    assert not exc_info.value.rate_limited


@pytest.mark.parametrize("reply", [
    {},
    {"candidates": []},
    {"candidates": [{"content": {"parts": []}}]},
    {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    {"candidates": [{"finishReason": "SAFETY"}]},
    {"candidates": ["not a candidate"]},
    {"candidates": [{"content": "plain text"}]},
    {"candidates": [{"content": {"parts": ["not a part"]}}]},
    {"candidates": {"content": {"parts": [{"text": "hi"}]}}},
])
def test_reply_without_text_is_an_upstream_error(reply):
    with pytest.raises(UpstreamError):
        asyncio.run(make_client(lambda request: httpx.Response(200, json=reply)).generate("hi"))


def test_transport_failure_is_an_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError, match="request failed"):
        asyncio.run(make_client(handler).generate("hi"))


def test_static_token_must_not_be_empty():
    with pytest.raises(ConfigurationError):
        StaticTokenProvider("")

"""Tests for the chat-completions generator client."""

from __future__ import annotations

import json

import pytest
import requests

from planner_app.services import ai_client
from planner_app.services.ai_client import PlanGeneratorClient
from planner_app.services.errors import ConfigurationError, GeneratorFailure


class DummyResponse:
    def __init__(self, body=None, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def _client(**overrides):
    params = dict(api_key="secret", api_base="https://example.test/v1/", model="test-model")
    params.update(overrides)
    return PlanGeneratorClient(**params)


def test_generate_posts_chat_completion(monkeypatch):
    calls = {}

    def fake_post(url, headers=None, data=None, timeout=None):
        calls.update(url=url, headers=headers, payload=json.loads(data), timeout=timeout)
        return DummyResponse(
            {"model": "served-model", "choices": [{"message": {"content": '{"monthly_summary": "x"}'}}]}
        )

    monkeypatch.setattr(ai_client.requests, "post", fake_post)

    output = _client(connect_timeout=5, read_timeout=30).generate("plan my month")

    assert calls["url"] == "https://example.test/v1/chat/completions"
    assert calls["headers"]["Authorization"] == "Bearer secret"
    assert calls["payload"]["messages"][-1] == {"role": "user", "content": "plan my month"}
    assert calls["timeout"] == (5, 30)
    assert output.format == "json"
    assert output.model == "served-model"


def test_generate_without_key_raises_configuration_error(monkeypatch):
    monkeypatch.setattr(ai_client.requests, "post", lambda *a, **k: pytest.fail("should not call"))

    with pytest.raises(ConfigurationError):
        _client(api_key="").generate("prompt")


@pytest.mark.parametrize(
    "response,message",
    [
        (DummyResponse({"choices": []}, status_code=502), "request failed"),
        (DummyResponse(None), "non-JSON"),
        (DummyResponse({"choices": [{"message": {"content": "   "}}]}), "empty content"),
    ],
)
def test_generate_failures(monkeypatch, response, message):
    monkeypatch.setattr(ai_client.requests, "post", lambda *a, **k: response)

    with pytest.raises(GeneratorFailure) as excinfo:
        _client().generate("prompt")

    assert message in excinfo.value.message


def test_timeout_is_not_retried(monkeypatch):
    attempts = []

    def slow_post(*args, **kwargs):
        attempts.append(1)
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(ai_client.requests, "post", slow_post)

    with pytest.raises(GeneratorFailure) as excinfo:
        _client().generate("prompt")

    assert "timed out" in excinfo.value.message
    assert len(attempts) == 1


def test_client_built_from_app_config(app_with_db):
    client = ai_client.get_generator_client()

    assert isinstance(client, PlanGeneratorClient)
    assert client.api_key == "test-key"
    assert ai_client.is_configured(client) is True

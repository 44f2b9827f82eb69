"""Unit tests for conversation_memory.llm.openai_client.

A fake session stands in for ``requests.Session`` so no network access is
needed.
"""
from __future__ import annotations

from typing import Any

import pytest
import requests

from conversation_memory.config import ClientConfig
from conversation_memory.errors import ConfigurationError, ServiceError
from conversation_memory.llm.base import CompletionClient, ScriptedClient
from conversation_memory.llm.openai_client import OpenAIChatClient


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def _ok(content: Any = "Hello Alice!") -> _FakeResponse:
    return _FakeResponse(body={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _make_client(session: _FakeSession, **config: Any) -> OpenAIChatClient:
    return OpenAIChatClient(ClientConfig(api_key="sk-test", **config), session=session)  # type: ignore[arg-type]


class TestOpenAIChatClientConstruction:
    def test_missing_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="API key"):
            OpenAIChatClient(ClientConfig())

    def test_api_key_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        client = OpenAIChatClient(ClientConfig(), session=_FakeSession(_ok()))  # type: ignore[arg-type]
        assert client.config.api_key == "sk-env"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(_make_client(_FakeSession(_ok())), CompletionClient)
        assert isinstance(ScriptedClient(), CompletionClient)


class TestOpenAIChatClientComplete:
    def test_returns_content(self) -> None:
        assert _make_client(_FakeSession(_ok())).complete("Hi") == "Hello Alice!"

    def test_request_shape(self) -> None:
        session = _FakeSession(_ok())
        client = _make_client(session, base_url="http://localhost:8000/v1/", timeout=5, max_tokens=50)
        client.system_prompt = "Be brief."
        client.complete("Hi")
        call = session.calls[0]
        assert call["url"] == "http://localhost:8000/v1/chat/completions"
        assert call["timeout"] == 5
        assert call["headers"]["Authorization"] == "Bearer sk-test"
        assert call["json"]["max_tokens"] == 50
        assert call["json"]["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi"},
        ]

    def test_max_tokens_omitted_by_default(self) -> None:
        session = _FakeSession(_ok())
        _make_client(session).complete("Hi")
        assert "max_tokens" not in session.calls[0]["json"]

    def test_timeout(self) -> None:
        client = _make_client(_FakeSession(error=requests.Timeout("slow")))
        with pytest.raises(ServiceError) as exc_info:
            client.complete("Hi")
        assert exc_info.value.kind == "timeout"
        assert exc_info.value.retryable

    def test_network_error(self) -> None:
        client = _make_client(_FakeSession(error=requests.ConnectionError("refused")))
        with pytest.raises(ServiceError) as exc_info:
            client.complete("Hi")
        assert exc_info.value.kind == "network"

    @pytest.mark.parametrize(
        "status,kind,retryable",
        [
            (401, "auth", False),
            (403, "auth", False),
            (429, "rate_limit", True),
            (500, "server", True),
            (503, "server", True),
            (400, "unknown", False),
        ],
    )
    def test_http_errors(self, status: int, kind: str, retryable: bool) -> None:
        client = _make_client(_FakeSession(_FakeResponse(status_code=status, text="nope")))
        with pytest.raises(ServiceError) as exc_info:
            client.complete("Hi")
        assert exc_info.value.kind == kind
        assert exc_info.value.status_code == status
        assert exc_info.value.retryable is retryable

    @pytest.mark.parametrize(
        "response",
        [
            _FakeResponse(body=ValueError("not json")),
            _FakeResponse(body={"choices": []}),
            _FakeResponse(body={"unexpected": True}),
            _ok(content=None),
        ],
    )
    def test_bad_body(self, response: _FakeResponse) -> None:
        with pytest.raises(ServiceError) as exc_info:
            _make_client(_FakeSession(response)).complete("Hi")
        assert exc_info.value.kind == "response"


class TestScriptedClient:
    def test_replays_then_falls_back(self) -> None:
        client = ScriptedClient(["first"])
        assert client.complete("a") == "first"
        assert client.complete("Current Input: hello").startswith("[offline reply]")
        assert client.calls == 2

    def test_custom_fallback(self) -> None:
        client = ScriptedClient(fallback=lambda prompt: prompt.upper())
        assert client.complete("hi") == "HI"

    def test_raises_scripted_errors(self) -> None:
        client = ScriptedClient([ServiceError("down", kind="server")])
        with pytest.raises(ServiceError):
            client.complete("hi")

"""Chat-completions client over HTTP.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint with
``requests`` and maps every failure onto ``ServiceError``.

Classes
-------
- OpenAIChatClient  — blocking ``complete(prompt)`` over HTTP
"""
from __future__ import annotations

import logging
import time

import requests

from conversation_memory.config import ClientConfig
from conversation_memory.errors import ConfigurationError, ServiceError

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Send single-prompt chat completions to an OpenAI-compatible API.

    Parameters
    ----------
    config:
        Model, credentials, endpoint and timeout settings.
    system_prompt:
        Optional system message sent before every prompt.
    session:
        Optional ``requests.Session`` to reuse connections (and to inject a
        fake in tests).

    Raises
    ------
    ConfigurationError
        If no API key is configured.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        system_prompt: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        if not self.config.api_key:
            raise ConfigurationError(
                "No API key configured. Set OPENAI_API_KEY or pass ClientConfig(api_key=...)."
            )
        self.system_prompt = system_prompt
        self._session = session or requests.Session()

    def complete(self, prompt: str) -> str:
        """Return the model's reply to ``prompt``.

        Raises
        ------
        ServiceError
            On timeout, authentication failure, rate limiting, transport
            errors, server errors or an unexpected response body.
        """
        messages: list[dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, object] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens is not None:
            payload["max_tokens"] = self.config.max_tokens

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.config.base_url.rstrip('/')}/chat/completions"

        started = time.monotonic()
        try:
            response = self._session.post(
                url,
                headers=headers,
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.Timeout as exc:
            raise ServiceError(
                f"Request timed out after {self.config.timeout}s", kind="timeout"
            ) from exc
        except requests.RequestException as exc:
            raise ServiceError(f"Request failed: {exc}", kind="network") from exc

        _raise_for_status(response)

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ServiceError("Unexpected response body from completion API", kind="response") from exc
        if not isinstance(content, str):
            raise ServiceError("Completion API returned no text content", kind="response")

        logger.debug(
            "OpenAIChatClient: %s replied in %.2fs (%d chars)",
            self.config.model,
            time.monotonic() - started,
            len(content),
        )
        return content

    def __repr__(self) -> str:
        return f"OpenAIChatClient(model={self.config.model!r}, base_url={self.config.base_url!r})"


def _raise_for_status(response: requests.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    detail = response.text[:200]
    if status in (401, 403):
        kind = "auth"
    elif status == 429:
        kind = "rate_limit"
    elif status >= 500:
        kind = "server"
    else:
        kind = "unknown"
    raise ServiceError(f"Completion API returned HTTP {status}: {detail}", kind=kind, status_code=status)

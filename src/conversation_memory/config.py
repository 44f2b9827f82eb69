"""Configuration models for memory policies and the completion client.

Both models are Pydantic ``BaseModel`` subclasses.  Validation failures
are re-raised as ``ConfigurationError`` so that callers only need to
handle the library's own exception types.

Classes
-------
- MemoryConfig  — which retention policy to build and its parameters
- ClientConfig  — model, credentials and timeout for the completion client

Functions
---------
- load_config   — read a YAML file holding ``memory`` and ``client`` sections
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from conversation_memory.errors import ConfigurationError
from conversation_memory.memory.base import PolicyKind

_API_KEY_ENV = "OPENAI_API_KEY"


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "config"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class MemoryConfig(BaseModel):
    """Parameters for building a retention policy.

    Parameters
    ----------
    policy:
        Which strategy to build.  Default: ``buffer``.
    window_k:
        Window width for the ``window`` policy.  Default: 5.
    capacity:
        Maximum retained turns for the ``scored`` policy.  Default: 10.
    prune_to:
        Turns kept when the ``scored`` policy prunes.  Defaults to
        ``capacity``.
    summarize_every:
        Pending turns that trigger summarization (``summary`` policy).
    max_summary_tokens:
        Token budget for the offline extractive summarizer.
    human_prefix, ai_prefix:
        Role labels used when rendering context.
    """

    policy: PolicyKind = PolicyKind.BUFFER
    window_k: int = Field(default=5, ge=1)
    capacity: int = Field(default=10, ge=1)
    prune_to: int | None = Field(default=None, ge=1)
    summarize_every: int = Field(default=1, ge=1)
    max_summary_tokens: int = Field(default=256, ge=1)
    human_prefix: str = "human"
    ai_prefix: str = "assistant"

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def _check_prune_to(self) -> MemoryConfig:
        if self.prune_to is not None and self.prune_to > self.capacity:
            raise ValueError(
                f"prune_to ({self.prune_to}) must not exceed capacity ({self.capacity})"
            )
        return self

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> MemoryConfig:
        """Build a config from a plain dict, raising ``ConfigurationError``."""
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid memory config: {_validation_message(exc)}") from exc

    @classmethod
    def from_yaml(cls, raw: str) -> MemoryConfig:
        """Build a config from a YAML document (a mapping of fields)."""
        return cls.from_mapping(_load_yaml_mapping(raw))


class ClientConfig(BaseModel):
    """Settings for ``OpenAIChatClient``.

    ``api_key`` falls back to the ``OPENAI_API_KEY`` environment variable
    when not given explicitly.
    """

    model: str = "gpt-3.5-turbo"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    api_key: str | None = Field(default_factory=lambda: os.environ.get(_API_KEY_ENV))
    base_url: str = "https://api.openai.com/v1"
    timeout: float = Field(default=60.0, gt=0.0)
    max_tokens: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True, "extra": "forbid"}

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> ClientConfig:
        """Build a config from a plain dict, raising ``ConfigurationError``."""
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid client config: {_validation_message(exc)}") from exc

    def __repr__(self) -> str:
        key_state = "set" if self.api_key else "missing"
        return f"ClientConfig(model={self.model!r}, api_key={key_state}, timeout={self.timeout})"


def _load_yaml_mapping(raw: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration document must be a mapping.")
    return data


def load_config(path: str | Path) -> tuple[MemoryConfig, ClientConfig]:
    """Load ``memory`` and ``client`` sections from a YAML file.

    Example file::

        memory:
          policy: window
          window_k: 3
        client:
          model: gpt-4o-mini
          timeout: 30

    Both sections are optional.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or any value is invalid.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {str(path)!r}: {exc}") from exc

    data = _load_yaml_mapping(raw)
    unknown = set(data) - {"memory", "client"}
    if unknown:
        raise ConfigurationError(f"Unknown config section(s): {', '.join(sorted(unknown))}")
    return MemoryConfig.from_mapping(data.get("memory")), ClientConfig.from_mapping(data.get("client"))

"""Sample conversations and turn-file loading for demos and the CLI.

Turn files are YAML (or JSON, which YAML also reads) holding a list of
mappings with ``human`` and ``ai`` keys and optional ``importance`` and
``category``.
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from conversation_memory.errors import ConfigurationError
from conversation_memory.memory.turn import Turn

SAMPLE_EXCHANGES: list[dict[str, object]] = [
    {"human": "My name is Alice", "ai": "Nice to meet you, Alice!", "importance": 3, "category": "personal"},
    {
        "human": "I work as a software engineer",
        "ai": "That's a great profession! What technologies do you work with?",
        "importance": 2,
        "category": "personal",
    },
    {
        "human": "I mainly use Python and JavaScript",
        "ai": "Excellent choices! Both are very popular and versatile languages.",
        "importance": 2,
        "category": "technical",
    },
    {
        "human": "I'm working on a web application",
        "ai": "Sounds interesting! What kind of web application are you building?",
        "importance": 1,
        "category": "technical",
    },
    {
        "human": "It's an e-commerce platform",
        "ai": "E-commerce is a great field! Are you using any specific frameworks?",
        "importance": 3,
        "category": "technical",
    },
    {
        "human": "Yes, I'm using React for frontend",
        "ai": "React is an excellent choice for e-commerce applications!",
        "importance": 1,
        "category": "technical",
    },
]


def _to_turn(item: object, index: int) -> Turn:
    if not isinstance(item, dict):
        raise ConfigurationError(f"Turn #{index + 1} must be a mapping, got {type(item).__name__}.")
    try:
        return Turn(
            human_text=str(item["human"]),
            ai_text=str(item["ai"]),
            importance=item.get("importance", 1),
            category=item.get("category", "general"),
        )
    except KeyError as exc:
        raise ConfigurationError(f"Turn #{index + 1} is missing the {exc.args[0]!r} key.") from None
    except ValidationError as exc:
        raise ConfigurationError(f"Turn #{index + 1} is invalid: {exc.errors()[0]['msg']}") from exc


def sample_turns() -> list[Turn]:
    """Return the built-in six-exchange sample conversation as turns."""
    return [_to_turn(item, index) for index, item in enumerate(SAMPLE_EXCHANGES)]


def load_turns(path: str | Path) -> list[Turn]:
    """Read turns from a YAML or JSON file.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or does not hold a list of turn mappings.
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot load turns from {str(path)!r}: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigurationError("A turns file must contain a list of turns.")
    return [_to_turn(item, index) for index, item in enumerate(data)]

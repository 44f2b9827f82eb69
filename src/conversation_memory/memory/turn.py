"""Conversation turn model and the ordered turn store.

Classes
-------
- Turn         — one human input paired with one assistant reply
- ChatMessage  — a single role-tagged message in the sequence form of context
- TurnStore    — append-only ordered record of turns
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_HUMAN_PREFIX = "human"
DEFAULT_AI_PREFIX = "assistant"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Turn(BaseModel):
    """A single exchange: one human input and the assistant's reply.

    Turns are immutable once created.  Stores never edit a turn in place;
    they only append new ones.

    Parameters
    ----------
    human_text:
        What the human said.
    ai_text:
        What the assistant replied.
    timestamp:
        When the turn was recorded (UTC).
    importance:
        Retention priority, 1 or higher.  Only the Scored policy acts on it.
    category:
        Free-form topical label such as ``"technical"`` or ``"personal"``.
    """

    human_text: str
    ai_text: str
    timestamp: datetime = Field(default_factory=_utcnow)
    importance: int = Field(default=1, ge=1)
    category: str = Field(default="general", min_length=1)

    model_config = {"frozen": True}

    def render(
        self,
        human_prefix: str = DEFAULT_HUMAN_PREFIX,
        ai_prefix: str = DEFAULT_AI_PREFIX,
    ) -> str:
        """Render as ``"<human_prefix>: <text>\\n<ai_prefix>: <text>"``."""
        return f"{human_prefix}: {self.human_text}\n{ai_prefix}: {self.ai_text}"

    def to_messages(self) -> list[ChatMessage]:
        """Split the turn into its human and assistant messages."""
        return [
            ChatMessage(role="human", content=self.human_text),
            ChatMessage(role="assistant", content=self.ai_text),
        ]


class ChatMessage(BaseModel):
    """A role-tagged message, the sequence form of conversation context."""

    role: Literal["human", "assistant", "system"]
    content: str

    model_config = {"frozen": True}


def render_turns(
    turns: list[Turn] | tuple[Turn, ...],
    human_prefix: str = DEFAULT_HUMAN_PREFIX,
    ai_prefix: str = DEFAULT_AI_PREFIX,
    separator: str = "\n\n",
) -> str:
    """Render turns as role-labelled blocks joined by ``separator``."""
    return separator.join(turn.render(human_prefix, ai_prefix) for turn in turns)


class TurnStore:
    """Ordered, append-only record of conversation turns.

    Every stored turn is paired with a monotonically increasing insertion
    sequence number, which callers use for deterministic recency ordering
    when two turns share a timestamp.

    Timestamps never go backwards within one store: a turn stamped earlier
    than the last stored turn is stored as a copy carrying the last
    timestamp.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[int, Turn]] = []
        self._next_sequence: int = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, turn: Turn) -> Turn:
        """Insert ``turn`` at the end of the store.

        Returns
        -------
        Turn
            The turn as stored (re-stamped if its timestamp was earlier than
            the previous turn's).
        """
        if self._entries:
            last_timestamp = self._entries[-1][1].timestamp
            if turn.timestamp < last_timestamp:
                logger.debug(
                    "TurnStore: re-stamping out-of-order turn %s -> %s",
                    turn.timestamp.isoformat(),
                    last_timestamp.isoformat(),
                )
                turn = turn.model_copy(update={"timestamp": last_timestamp})
        self._entries.append((self._next_sequence, turn))
        self._next_sequence += 1
        return turn

    def all(self) -> tuple[Turn, ...]:
        """Return every stored turn, oldest first, as an immutable tuple."""
        return tuple(turn for _, turn in self._entries)

    def last(self, count: int) -> tuple[Turn, ...]:
        """Return the ``count`` most recent turns in chronological order."""
        if count <= 0:
            return ()
        return tuple(turn for _, turn in self._entries[-count:])

    def entries(self) -> list[tuple[int, Turn]]:
        """Return ``(sequence, turn)`` pairs, oldest first, as a new list."""
        return list(self._entries)

    def replace(self, entries: list[tuple[int, Turn]]) -> None:
        """Replace the stored entries with a subset of previous entries.

        The entries are re-sorted by sequence number so that the store
        always iterates in insertion order.
        """
        self._entries = sorted(entries, key=lambda entry: entry[0])

    def clear(self) -> None:
        """Remove every turn.  Safe to call repeatedly."""
        self._entries.clear()
        self._next_sequence = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"TurnStore(turns={len(self._entries)})"

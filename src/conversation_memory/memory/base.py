"""Abstract retention policy shared by every memory strategy.

A policy owns its conversation state exclusively and exposes the whole
memory surface: ``append``/``save`` to record a turn, ``context`` and
``messages`` to render what is retained, ``all`` and ``stats`` to inspect
it, and ``clear`` to reset it.

Classes
-------
- PolicyKind    — enum naming the four retention strategies
- MemoryStats   — summary statistics over retained turns
- MemoryPolicy  — abstract base class for all policies
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, Field

from conversation_memory.memory.turn import (
    DEFAULT_AI_PREFIX,
    DEFAULT_HUMAN_PREFIX,
    ChatMessage,
    Turn,
    render_turns,
)


class PolicyKind(str, Enum):
    """The retention strategies a policy can implement."""

    BUFFER = "buffer"
    WINDOW = "window"
    SUMMARY = "summary"
    SCORED = "scored"


class MemoryStats(BaseModel):
    """Statistics over the turns a policy currently retains.

    Parameters
    ----------
    total_turns:
        Turns currently exposed by the policy.
    stored_turns:
        Turns held internally.  Exceeds ``total_turns`` only for the Window
        policy, which keeps its full history behind the view.
    categories:
        Distinct categories among the retained turns.
    average_importance:
        Arithmetic mean importance, rounded to 2 decimals (0.0 when empty).
    oldest_timestamp:
        Timestamp of the oldest retained turn, or None when empty.
    digest_chars:
        Length of the rolling digest (Summary policy only).
    """

    total_turns: int = 0
    stored_turns: int = 0
    categories: set[str] = Field(default_factory=set)
    average_importance: float = 0.0
    oldest_timestamp: datetime | None = None
    digest_chars: int = 0


def compute_stats(
    turns: tuple[Turn, ...] | list[Turn],
    *,
    stored_turns: int | None = None,
    digest_chars: int = 0,
) -> MemoryStats:
    """Build a ``MemoryStats`` for ``turns``."""
    if not turns:
        return MemoryStats(
            stored_turns=stored_turns or 0,
            digest_chars=digest_chars,
        )
    average = sum(turn.importance for turn in turns) / len(turns)
    return MemoryStats(
        total_turns=len(turns),
        stored_turns=len(turns) if stored_turns is None else stored_turns,
        categories={turn.category for turn in turns},
        average_importance=round(average, 2),
        oldest_timestamp=min(turn.timestamp for turn in turns),
        digest_chars=digest_chars,
    )


class MemoryPolicy(ABC):
    """Base class for conversation retention policies.

    Subclasses implement ``_append``, ``_retained`` and ``_clear``; the
    base class provides locking, filtering and rendering on top of them.
    Every public method holds the instance's re-entrant lock, so a single
    append or read is never observed half-applied.

    Parameters
    ----------
    human_prefix:
        Role label used for human text in rendered context.
    ai_prefix:
        Role label used for assistant text in rendered context.
    separator:
        String placed between rendered turns.  Default: a blank line.
    """

    kind: ClassVar[PolicyKind]

    def __init__(
        self,
        human_prefix: str = DEFAULT_HUMAN_PREFIX,
        ai_prefix: str = DEFAULT_AI_PREFIX,
        separator: str = "\n\n",
    ) -> None:
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix
        self.separator = separator
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _append(self, turn: Turn) -> Turn:
        """Record ``turn`` and apply the retention rule."""

    @abstractmethod
    def _retained(self) -> tuple[Turn, ...]:
        """Return the exposed turns in chronological order."""

    @abstractmethod
    def _clear(self) -> None:
        """Drop all state."""

    def _order_for_context(self, turns: list[Turn]) -> list[Turn]:
        """Order filtered turns for rendering.  Chronological by default."""
        return turns

    def _filtered(
        self,
        category: str | None,
        min_importance: int | None,
    ) -> list[Turn]:
        with self._lock:
            turns = list(self._retained())
        if category is not None:
            turns = [turn for turn in turns if turn.category == category]
        if min_importance is not None:
            turns = [turn for turn in turns if turn.importance >= min_importance]
        return turns

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, turn: Turn) -> Turn:
        """Record a completed turn.

        Returns
        -------
        Turn
            The turn as stored.
        """
        with self._lock:
            return self._append(turn)

    def save(
        self,
        human_text: str,
        ai_text: str,
        importance: int = 1,
        category: str = "general",
    ) -> Turn:
        """Build a ``Turn`` from its parts and append it."""
        turn = Turn(
            human_text=human_text,
            ai_text=ai_text,
            importance=importance,
            category=category,
        )
        return self.append(turn)

    def all(self) -> tuple[Turn, ...]:
        """Return the exposed turns, oldest first, as an immutable tuple."""
        with self._lock:
            return self._retained()

    def select(
        self,
        category: str | None = None,
        min_importance: int | None = None,
    ) -> list[Turn]:
        """Return exposed turns matching the filters, in rendering order.

        Parameters
        ----------
        category:
            Keep only turns whose category equals this value.
        min_importance:
            Keep only turns with ``importance >= min_importance``.
        """
        return self._order_for_context(self._filtered(category, min_importance))

    def context(
        self,
        category: str | None = None,
        min_importance: int | None = None,
    ) -> str:
        """Render the retained memory as a single text block.

        Returns an empty string when nothing is retained.
        """
        return render_turns(
            self.select(category, min_importance),
            self.human_prefix,
            self.ai_prefix,
            self.separator,
        )

    def messages(
        self,
        category: str | None = None,
        min_importance: int | None = None,
    ) -> list[ChatMessage]:
        """Render the retained memory as chat messages, oldest first."""
        result: list[ChatMessage] = []
        for turn in self._filtered(category, min_importance):
            result.extend(turn.to_messages())
        return result

    def stats(self) -> MemoryStats:
        """Return statistics over the retained turns."""
        with self._lock:
            return compute_stats(self._retained())

    def clear(self) -> None:
        """Reset to the freshly constructed state.  Idempotent."""
        with self._lock:
            self._clear()

    def __len__(self) -> int:
        return len(self.all())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(turns={len(self)})"

"""Scored policy: importance- and category-weighted pruning.

Each turn carries an integer ``importance`` (>= 1) and a ``category``.
When the number of retained turns exceeds the configured capacity, the
policy keeps the highest-importance turns, breaking ties in favour of the
more recent turn, and stores the survivors back in chronological order.

Retention is by score, but iteration is always chronological, and
``context()`` always lists the newest turn first.

Classes
-------
- ScoredPolicy  — capacity-bounded, importance-ranked retention
"""
from __future__ import annotations

import logging

from conversation_memory.errors import ConfigurationError
from conversation_memory.memory.base import MemoryPolicy, PolicyKind
from conversation_memory.memory.turn import Turn, TurnStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


def _retention_key(entry: tuple[int, Turn]) -> tuple[int, int]:
    """Sort key for pruning: higher importance first, then newer first."""
    sequence, turn = entry
    return (turn.importance, sequence)


class ScoredPolicy(MemoryPolicy):
    """Retain at most ``capacity`` turns, ranked by importance.

    Parameters
    ----------
    capacity:
        Maximum number of turns retained after any append.  Must be >= 1.
        Default: 10.
    prune_to:
        Number of turns kept when pruning triggers.  Defaults to
        ``capacity``.  A lower value prunes in larger batches, so pruning
        runs less often.  Must satisfy ``1 <= prune_to <= capacity``.

    Raises
    ------
    ConfigurationError
        If ``capacity`` or ``prune_to`` is out of range.
    """

    kind = PolicyKind.SCORED

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        prune_to: int | None = None,
        **render_options: str,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigurationError(f"capacity must be a positive integer, got {capacity!r}.")
        if prune_to is None:
            prune_to = capacity
        if isinstance(prune_to, bool) or not isinstance(prune_to, int) or not 1 <= prune_to <= capacity:
            raise ConfigurationError(
                f"prune_to must be an integer in [1, {capacity}], got {prune_to!r}."
            )

        super().__init__(**render_options)
        self.capacity = capacity
        self.prune_to = prune_to
        self._store = TurnStore()
        self._evicted_count: int = 0

    @property
    def evicted_count(self) -> int:
        """Total number of turns removed by pruning since the last clear."""
        return self._evicted_count

    def ranked(self) -> list[Turn]:
        """Return retained turns by retention priority, strongest first."""
        with self._lock:
            entries = self._store.entries()
        entries.sort(key=_retention_key, reverse=True)
        return [turn for _, turn in entries]

    # ------------------------------------------------------------------
    # MemoryPolicy hooks
    # ------------------------------------------------------------------

    def _append(self, turn: Turn) -> Turn:
        stored = self._store.append(turn)
        logger.debug(
            "ScoredPolicy: stored turn (importance=%d, category=%r)",
            stored.importance,
            stored.category,
        )
        if len(self._store) > self.capacity:
            self._prune()
        return stored

    def _prune(self) -> None:
        entries = self._store.entries()
        # sorted() is stable; the key already orders equal importance by recency.
        ranked = sorted(entries, key=_retention_key, reverse=True)
        kept = ranked[: self.prune_to]
        evicted = len(entries) - len(kept)
        self._store.replace(kept)
        self._evicted_count += evicted
        logger.debug(
            "ScoredPolicy: pruned %d turn(s), %d retained (capacity=%d)",
            evicted,
            len(kept),
            self.capacity,
        )

    def _retained(self) -> tuple[Turn, ...]:
        return self._store.all()

    def _order_for_context(self, turns: list[Turn]) -> list[Turn]:
        return list(reversed(turns))

    def _clear(self) -> None:
        self._store.clear()
        self._evicted_count = 0

    def __repr__(self) -> str:
        return f"ScoredPolicy(capacity={self.capacity}, turns={len(self._store)})"

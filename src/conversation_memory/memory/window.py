"""Window policy: expose only the last K turns.

The window is a view over an unbounded store.  Nothing is evicted on
write; older turns simply fall outside the view and become visible again
if the window is widened with ``resize``.

Classes
-------
- WindowPolicy  — sliding view of the K most recent turns
"""
from __future__ import annotations

import logging

from conversation_memory.errors import ConfigurationError
from conversation_memory.memory.base import MemoryStats, MemoryPolicy, PolicyKind, compute_stats
from conversation_memory.memory.turn import Turn, TurnStore

logger = logging.getLogger(__name__)


def _validate_k(k: int) -> int:
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise ConfigurationError(f"window width k must be a positive integer, got {k!r}.")
    return k


class WindowPolicy(MemoryPolicy):
    """Expose the ``k`` most recent turns of an unbounded history.

    Parameters
    ----------
    k:
        Number of most-recent turns exposed by ``all()``, ``context()``
        and ``messages()``.  Must be >= 1.

    Raises
    ------
    ConfigurationError
        If ``k`` is not a positive integer.
    """

    kind = PolicyKind.WINDOW

    def __init__(self, k: int = 5, **render_options: str) -> None:
        self._k = _validate_k(k)
        super().__init__(**render_options)
        self._store = TurnStore()

    @property
    def k(self) -> int:
        """Current window width."""
        return self._k

    def resize(self, k: int) -> None:
        """Change the window width.

        Widening the window re-exposes older turns still held in the
        underlying store.

        Raises
        ------
        ConfigurationError
            If ``k`` is not a positive integer.
        """
        new_k = _validate_k(k)
        with self._lock:
            logger.debug("WindowPolicy: resizing window %d -> %d", self._k, new_k)
            self._k = new_k

    def history(self) -> tuple[Turn, ...]:
        """Return the full stored history, including turns outside the window."""
        with self._lock:
            return self._store.all()

    def _append(self, turn: Turn) -> Turn:
        stored = self._store.append(turn)
        logger.debug(
            "WindowPolicy: stored turn #%d (exposing last %d)",
            len(self._store),
            self._k,
        )
        return stored

    def _retained(self) -> tuple[Turn, ...]:
        return self._store.last(self._k)

    def _clear(self) -> None:
        self._store.clear()

    def stats(self) -> MemoryStats:
        with self._lock:
            return compute_stats(self._retained(), stored_turns=len(self._store))

    def __repr__(self) -> str:
        return (
            f"WindowPolicy(k={self._k}, "
            f"exposed={len(self._retained())}, stored={len(self._store)})"
        )

"""Summary policy: a rolling digest maintained by a summarizer.

State is a digest string plus the turns not yet folded into it.  Each
append adds the turn to the pending list and, once ``summarize_every``
turns are pending, asks the summarizer for a new digest covering the old
digest and every pending turn.

With the default ``summarize_every=1`` the digest is re-summarized on
every append: always fresh, at the price of one extra model call per turn.

Failure is fail-soft.  If the summarizer raises ``ServiceError`` the
digest is left exactly as it was, the pending turns are kept for the next
attempt, and ``SummarizationError`` is raised to the caller of ``append``.

Classes
-------
- SummaryPolicy  — rolling digest with pending-turn buffer
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from conversation_memory.errors import ConfigurationError, ServiceError, SummarizationError
from conversation_memory.memory.base import MemoryPolicy, MemoryStats, PolicyKind
from conversation_memory.memory.turn import ChatMessage, Turn

if TYPE_CHECKING:
    from conversation_memory.context.summarizer import Summarizer

logger = logging.getLogger(__name__)


class SummaryPolicy(MemoryPolicy):
    """Keep a compressed digest instead of raw turns.

    Parameters
    ----------
    summarizer:
        Adapter with ``summarize(digest, turns) -> str``.
    summarize_every:
        Number of pending turns that triggers summarization.  Must be >= 1.
        Default: 1 (summarize on every append).

    Raises
    ------
    ConfigurationError
        If ``summarize_every`` is not a positive integer.
    """

    kind = PolicyKind.SUMMARY

    def __init__(
        self,
        summarizer: Summarizer,
        summarize_every: int = 1,
        **render_options: str,
    ) -> None:
        if (
            isinstance(summarize_every, bool)
            or not isinstance(summarize_every, int)
            or summarize_every < 1
        ):
            raise ConfigurationError(
                f"summarize_every must be a positive integer, got {summarize_every!r}."
            )
        if summarizer is None:
            raise ConfigurationError("SummaryPolicy requires a summarizer.")

        super().__init__(**render_options)
        self.summarizer = summarizer
        self.summarize_every = summarize_every
        self._digest: str = ""
        self._pending: list[Turn] = []
        self._covered_turns: int = 0
        self._covered_importance: int = 0
        self._covered_categories: set[str] = set()
        self._oldest_timestamp: datetime | None = None
        self._last_timestamp: datetime | None = None
        self._summarizer_calls: int = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def digest(self) -> str:
        """The latest digest.  Empty before the first summarization."""
        with self._lock:
            return self._digest

    @property
    def pending(self) -> tuple[Turn, ...]:
        """Turns not yet folded into the digest."""
        with self._lock:
            return tuple(self._pending)

    @property
    def summarizer_calls(self) -> int:
        """Number of successful summarizer calls since the last clear."""
        return self._summarizer_calls

    # ------------------------------------------------------------------
    # Summarization
    # ------------------------------------------------------------------

    def flush(self) -> str:
        """Summarize any pending turns now, regardless of ``summarize_every``.

        Returns
        -------
        str
            The resulting digest.

        Raises
        ------
        SummarizationError
            If the summarizer failed.  The previous digest is kept.
        """
        with self._lock:
            if self._pending:
                self._summarize()
            return self._digest

    def _summarize(self) -> None:
        pending = tuple(self._pending)
        try:
            new_digest = self.summarizer.summarize(self._digest, pending)
        except ServiceError as exc:
            logger.warning(
                "SummaryPolicy: summarization failed (%s); keeping previous digest "
                "with %d pending turn(s)",
                exc.kind,
                len(pending),
            )
            raise SummarizationError(exc, pending_turns=len(pending)) from exc

        self._digest = new_digest
        if self._oldest_timestamp is None:
            self._oldest_timestamp = pending[0].timestamp
        self._covered_turns += len(pending)
        self._covered_importance += sum(turn.importance for turn in pending)
        self._covered_categories.update(turn.category for turn in pending)
        self._pending.clear()
        self._summarizer_calls += 1
        logger.debug(
            "SummaryPolicy: digest updated to %d chars covering %d turn(s)",
            len(new_digest),
            self._covered_turns,
        )

    # ------------------------------------------------------------------
    # MemoryPolicy hooks
    # ------------------------------------------------------------------

    def _append(self, turn: Turn) -> Turn:
        if self._last_timestamp is not None and turn.timestamp < self._last_timestamp:
            turn = turn.model_copy(update={"timestamp": self._last_timestamp})
        self._last_timestamp = turn.timestamp
        self._pending.append(turn)
        if len(self._pending) >= self.summarize_every:
            self._summarize()
        return turn

    def _retained(self) -> tuple[Turn, ...]:
        return tuple(self._pending)

    def _clear(self) -> None:
        self._digest = ""
        self._pending.clear()
        self._covered_turns = 0
        self._covered_importance = 0
        self._covered_categories = set()
        self._oldest_timestamp = None
        self._last_timestamp = None
        self._summarizer_calls = 0

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def context(
        self,
        category: str | None = None,
        min_importance: int | None = None,
    ) -> str:
        """Return the latest digest.

        A digest blends every category and importance level together, so
        the filters are accepted for interface compatibility and ignored.
        Pending turns are not rendered; call ``flush()`` first to fold
        them in.
        """
        return self.digest

    def messages(
        self,
        category: str | None = None,
        min_importance: int | None = None,
    ) -> list[ChatMessage]:
        """Return the digest as a single system message (empty list before the first)."""
        digest = self.digest
        if not digest:
            return []
        return [ChatMessage(role="system", content=digest)]

    def stats(self) -> MemoryStats:
        """Statistics over every turn the digest and pending list represent."""
        with self._lock:
            covered = self._covered_turns + len(self._pending)
            if not covered:
                return MemoryStats(digest_chars=len(self._digest))
            importance_total = self._covered_importance + sum(t.importance for t in self._pending)
            categories = self._covered_categories | {t.category for t in self._pending}
            oldest = self._oldest_timestamp
            if oldest is None:
                oldest = self._pending[0].timestamp
            return MemoryStats(
                total_turns=covered,
                stored_turns=len(self._pending),
                categories=set(categories),
                average_importance=round(importance_total / covered, 2),
                oldest_timestamp=oldest,
                digest_chars=len(self._digest),
            )

    def __len__(self) -> int:
        """Turns represented by the digest plus the pending turns."""
        return self.stats().total_turns

    def __repr__(self) -> str:
        return (
            f"SummaryPolicy(digest_chars={len(self._digest)}, "
            f"pending={len(self._pending)}, calls={self._summarizer_calls})"
        )

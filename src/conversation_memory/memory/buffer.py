"""Buffer policy: keep every turn.

Context size grows linearly with the number of turns.  This favours
completeness over token cost and suits short conversations where every
earlier detail may matter.

Classes
-------
- BufferPolicy  — unbounded, complete conversation history
"""
from __future__ import annotations

import logging

from conversation_memory.memory.base import MemoryPolicy, PolicyKind
from conversation_memory.memory.turn import Turn, TurnStore

logger = logging.getLogger(__name__)


class BufferPolicy(MemoryPolicy):
    """Retain every appended turn, unbounded.

    ``context()`` renders all turns in insertion order as role-labelled
    blocks.
    """

    kind = PolicyKind.BUFFER

    def __init__(self, **render_options: str) -> None:
        super().__init__(**render_options)
        self._store = TurnStore()

    def _append(self, turn: Turn) -> Turn:
        stored = self._store.append(turn)
        logger.debug("BufferPolicy: stored turn #%d", len(self._store))
        return stored

    def _retained(self) -> tuple[Turn, ...]:
        return self._store.all()

    def _clear(self) -> None:
        self._store.clear()

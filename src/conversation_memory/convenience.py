"""Convenience API for conversation-memory — 3-line quickstart.

Example
-------
::

    from conversation_memory import Conversation
    convo = Conversation(policy="window", k=2)
    convo.save("My name is Alice", "Nice to meet you, Alice!")
    print(convo.context())

"""
from __future__ import annotations

from typing import Any

from conversation_memory.config import MemoryConfig
from conversation_memory.memory.base import MemoryPolicy, MemoryStats
from conversation_memory.memory.turn import Turn


class Conversation:
    """Zero-config memory for the common case.

    Builds a policy from keyword arguments so no configuration objects are
    needed.  Without a completion client the summary policy uses the
    offline extractive summarizer.

    Parameters
    ----------
    policy:
        ``"buffer"`` (default), ``"window"``, ``"summary"`` or ``"scored"``.
    k:
        Window width for the window policy.
    capacity:
        Capacity for the scored policy.
    client:
        Optional completion client used by the summary policy.

    Raises
    ------
    ConfigurationError
        If any parameter is invalid.
    """

    def __init__(
        self,
        policy: str = "buffer",
        *,
        k: int = 5,
        capacity: int = 10,
        client: Any = None,
    ) -> None:
        from conversation_memory.memory.factory import create_policy

        config = MemoryConfig.from_mapping({"policy": policy, "window_k": k, "capacity": capacity})
        self._memory = create_policy(config, client=client)

    @property
    def memory(self) -> MemoryPolicy:
        """The underlying policy."""
        return self._memory

    def save(self, human_text: str, ai_text: str, **turn_fields: Any) -> Turn:
        """Record an exchange.  Accepts ``importance`` and ``category``."""
        return self._memory.save(human_text, ai_text, **turn_fields)

    def context(self, **filters: Any) -> str:
        """Return the rendered memory."""
        return self._memory.context(**filters)

    def stats(self) -> MemoryStats:
        """Return memory statistics."""
        return self._memory.stats()

    def clear(self) -> None:
        """Forget everything."""
        self._memory.clear()

    def __repr__(self) -> str:
        return f"Conversation(policy={self._memory.kind.value!r}, turns={len(self._memory)})"

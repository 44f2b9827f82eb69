"""Conversation memory retention policies.

Public surface
--------------
- Turn, ChatMessage, TurnStore  — data model and ordered store
- MemoryPolicy, PolicyKind      — polymorphic policy interface
- MemoryStats                   — statistics over retained turns
- BufferPolicy                  — keep everything
- WindowPolicy                  — expose the last K turns
- SummaryPolicy                 — rolling LLM digest
- ScoredPolicy                  — importance-ranked, capacity-bounded

``create_policy`` lives in ``conversation_memory.memory.factory``.
"""
from __future__ import annotations

from conversation_memory.memory.base import MemoryPolicy, MemoryStats, PolicyKind
from conversation_memory.memory.buffer import BufferPolicy
from conversation_memory.memory.scored import ScoredPolicy
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.turn import ChatMessage, Turn, TurnStore
from conversation_memory.memory.window import WindowPolicy

__all__ = [
    "BufferPolicy",
    "ChatMessage",
    "MemoryPolicy",
    "MemoryStats",
    "PolicyKind",
    "ScoredPolicy",
    "SummaryPolicy",
    "Turn",
    "TurnStore",
    "WindowPolicy",
]

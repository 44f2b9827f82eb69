"""Text-generation collaborators.

Public surface
--------------
- CompletionClient  — protocol for ``complete(prompt) -> text``
- ScriptedClient    — offline client replaying canned replies
- OpenAIChatClient  — HTTP client for OpenAI-compatible chat completions
"""
from __future__ import annotations

from conversation_memory.llm.base import CompletionClient, ScriptedClient
from conversation_memory.llm.openai_client import OpenAIChatClient

__all__ = [
    "CompletionClient",
    "OpenAIChatClient",
    "ScriptedClient",
]

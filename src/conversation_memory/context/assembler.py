"""Turn a policy's retained memory into a prompt-ready payload.

Both functions here are pure: they read the policy and never change it.

Classes
-------
- PromptPayload  — ``{history, input}`` pair consumed by prompt templates

Functions
---------
- assemble           — build a ``PromptPayload`` from a policy and new input
- assemble_messages  — build a chat-message sequence ending with the input
"""
from __future__ import annotations

from pydantic import BaseModel

from conversation_memory.memory.base import MemoryPolicy
from conversation_memory.memory.turn import ChatMessage


class PromptPayload(BaseModel):
    """Variables handed to a prompt template.

    Parameters
    ----------
    history:
        Rendered conversation memory.  Empty when nothing is retained.
    input:
        The new user input.
    """

    history: str
    input: str

    model_config = {"frozen": True}

    def as_variables(self) -> dict[str, str]:
        """Return the payload as template variables."""
        return {"history": self.history, "input": self.input}

    @property
    def has_history(self) -> bool:
        return bool(self.history)


def assemble(
    policy: MemoryPolicy,
    user_input: str,
    *,
    category: str | None = None,
    min_importance: int | None = None,
) -> PromptPayload:
    """Combine ``policy``'s current context with ``user_input``.

    ``category`` and ``min_importance`` are passed through to
    ``policy.context``.
    """
    history = policy.context(category=category, min_importance=min_importance)
    return PromptPayload(history=history, input=user_input)


def assemble_messages(
    policy: MemoryPolicy,
    user_input: str,
    *,
    category: str | None = None,
    min_importance: int | None = None,
) -> list[ChatMessage]:
    """Return the policy's messages followed by ``user_input`` as a human message."""
    messages = policy.messages(category=category, min_importance=min_importance)
    messages.append(ChatMessage(role="human", content=user_input))
    return messages

"""Text-generation collaborator interface.

Classes
-------
- CompletionClient  — protocol: ``complete(prompt) -> text``
- ScriptedClient    — deterministic in-process client replaying canned replies
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from conversation_memory.errors import ServiceError


@runtime_checkable
class CompletionClient(Protocol):
    """Anything that turns a prompt into a reply.

    Implementations block until the reply is available and raise
    ``ServiceError`` for network, authentication, rate-limit and timeout
    failures.
    """

    def complete(self, prompt: str) -> str:
        ...


class ScriptedClient:
    """Replay canned replies in order, without any network access.

    Useful for offline demos and tests.

    Parameters
    ----------
    replies:
        Replies returned by successive ``complete`` calls.  An item that is
        a ``ServiceError`` instance is raised instead of returned.
    fallback:
        Called with the prompt once ``replies`` is exhausted.  Defaults to
        an acknowledgement echoing the start of the prompt's last line.
    """

    def __init__(
        self,
        replies: Iterable[str | ServiceError] = (),
        fallback: Callable[[str], str] | None = None,
    ) -> None:
        self._replies: list[str | ServiceError] = list(replies)
        self._fallback = fallback or _acknowledge
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._replies:
            reply = self._replies.pop(0)
            if isinstance(reply, ServiceError):
                raise reply
            return reply
        return self._fallback(prompt)

    @property
    def calls(self) -> int:
        """Number of ``complete`` calls made so far."""
        return len(self.prompts)

    def __repr__(self) -> str:
        return f"ScriptedClient(remaining={len(self._replies)}, calls={self.calls})"


def _acknowledge(prompt: str) -> str:
    lines = [line.strip() for line in prompt.strip().splitlines() if line.strip()]
    last = lines[-1] if lines else ""
    return f"[offline reply] Noted: {last[:80]}"

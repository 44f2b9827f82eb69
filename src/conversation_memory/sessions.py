"""Per-user conversation sessions.

A ``SessionRegistry`` hands each user their own ``ConversationSession``,
with a freshly built memory policy and a free-form profile.  The registry
is an ordinary object: create one per application and pass it around.

Classes
-------
- ConversationSession  — one user's memory, profile and activity timestamps
- SessionRegistry      — get-or-create store of sessions keyed by user ID
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from conversation_memory.config import MemoryConfig
from conversation_memory.errors import SummarizationError
from conversation_memory.memory.base import MemoryPolicy
from conversation_memory.memory.factory import create_policy
from conversation_memory.memory.turn import Turn

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a requested user session does not exist."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Session for user {user_id!r} not found.")


class ConversationSession:
    """A single user's conversation state.

    Parameters
    ----------
    user_id:
        Identifier of the user who owns this session.
    memory:
        The policy holding this user's turns.  Never shared with another
        session.
    """

    def __init__(self, user_id: str, memory: MemoryPolicy) -> None:
        now = datetime.now(timezone.utc)
        self.user_id = user_id
        self.memory = memory
        self.created_at = now
        self.last_active = now
        self.conversation_count = 0
        self.profile: dict[str, Any] = {}

    def touch(self) -> None:
        """Mark the session as active now."""
        self.last_active = datetime.now(timezone.utc)

    def record(
        self,
        human_text: str,
        ai_text: str,
        importance: int = 1,
        category: str = "general",
    ) -> Turn:
        """Save an exchange to this session's memory and count it.

        An exchange rejected by validation is not counted.
        ``SummarizationError`` from a summary policy propagates after the
        exchange has been counted, since the turn is kept as pending.
        """
        try:
            turn = self.memory.save(human_text, ai_text, importance=importance, category=category)
        except SummarizationError:
            self._count_exchange()
            raise
        self._count_exchange()
        return turn

    def _count_exchange(self) -> None:
        self.conversation_count += 1
        self.touch()

    def update_profile(self, **fields: Any) -> dict[str, Any]:
        """Merge ``fields`` into the profile and return a copy of it."""
        self.profile.update(fields)
        self.profile["updated_at"] = datetime.now(timezone.utc)
        return dict(self.profile)

    def __repr__(self) -> str:
        return (
            f"ConversationSession(user_id={self.user_id!r}, "
            f"conversations={self.conversation_count}, memory={self.memory!r})"
        )


class SessionRegistry:
    """Create and look up per-user sessions.

    Parameters
    ----------
    policy_factory:
        Zero-argument callable returning a new, empty policy for each
        session.  Defaults to building one from ``config``.
    config:
        Used when ``policy_factory`` is not given.  Defaults to a buffer
        policy.
    """

    def __init__(
        self,
        policy_factory: Callable[[], MemoryPolicy] | None = None,
        config: MemoryConfig | None = None,
    ) -> None:
        memory_config = config or MemoryConfig()
        self._policy_factory = policy_factory or (lambda: create_policy(memory_config))
        self._sessions: dict[str, ConversationSession] = {}
        self._lock = threading.Lock()

    def get_or_create(self, user_id: str) -> ConversationSession:
        """Return the session for ``user_id``, creating it on first use."""
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = ConversationSession(user_id, self._policy_factory())
                self._sessions[user_id] = session
                logger.debug("SessionRegistry: created session for %r", user_id)
            else:
                session.touch()
            return session

    def get(self, user_id: str) -> ConversationSession:
        """Return an existing session.

        Raises
        ------
        SessionNotFoundError
            If no session exists for ``user_id``.
        """
        with self._lock:
            try:
                return self._sessions[user_id]
            except KeyError:
                raise SessionNotFoundError(user_id) from None

    def remove(self, user_id: str) -> None:
        """End a session and discard its memory.

        Raises
        ------
        SessionNotFoundError
            If no session exists for ``user_id``.
        """
        with self._lock:
            try:
                session = self._sessions.pop(user_id)
            except KeyError:
                raise SessionNotFoundError(user_id) from None
        session.memory.clear()
        logger.debug("SessionRegistry: removed session for %r", user_id)

    def sessions(self) -> list[ConversationSession]:
        """Return all sessions in creation order."""
        with self._lock:
            return list(self._sessions.values())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __repr__(self) -> str:
        return f"SessionRegistry(sessions={len(self._sessions)})"

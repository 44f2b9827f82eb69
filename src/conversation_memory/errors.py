"""Exception hierarchy for conversation-memory.

Classes
-------
- ConversationMemoryError  — base class for every library error
- ServiceError             — a downstream text-generation call failed
- SummarizationError       — summarization failed; the prior digest was kept
- TemplateError            — missing or malformed prompt template variables
- ConfigurationError       — invalid policy or client parameters
"""
from __future__ import annotations


class ConversationMemoryError(Exception):
    """Base class for all conversation-memory errors."""


class ServiceError(ConversationMemoryError):
    """Raised when a call to the text-generation service fails.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    kind:
        Failure category: ``"timeout"``, ``"auth"``, ``"rate_limit"``,
        ``"network"``, ``"server"``, ``"response"`` or ``"unknown"``.
    status_code:
        HTTP status code when the failure came from an HTTP response.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """True for failures that may succeed when retried later."""
        return self.kind in {"timeout", "rate_limit", "network", "server"}


class SummarizationError(ServiceError):
    """Raised by ``SummaryPolicy.append`` when the summarizer failed.

    The policy has already kept its previous digest and retained the
    unsummarized turns; this exception only reports the failure.
    """

    def __init__(self, cause: ServiceError, pending_turns: int) -> None:
        self.cause = cause
        self.pending_turns = pending_turns
        super().__init__(
            f"Summarization failed ({cause.kind}): {cause}. "
            f"Kept previous digest; {pending_turns} turn(s) pending.",
            kind=cause.kind,
            status_code=cause.status_code,
        )


class TemplateError(ConversationMemoryError, ValueError):
    """Raised when a prompt template is malformed or variables are missing."""

    def __init__(self, message: str, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        super().__init__(message)


class ConfigurationError(ConversationMemoryError, ValueError):
    """Raised eagerly when a policy or client is given invalid parameters."""

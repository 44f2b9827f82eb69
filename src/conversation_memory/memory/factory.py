"""Build a retention policy from a ``MemoryConfig``.

The policy type is chosen once, at construction time, from
``MemoryConfig.policy``.

Functions
---------
- create_policy  — instantiate the configured policy
"""
from __future__ import annotations

from conversation_memory.config import MemoryConfig
from conversation_memory.context.summarizer import ExtractiveSummarizer, LLMSummarizer, Summarizer
from conversation_memory.errors import ConfigurationError
from conversation_memory.llm.base import CompletionClient
from conversation_memory.memory.base import MemoryPolicy, PolicyKind
from conversation_memory.memory.buffer import BufferPolicy
from conversation_memory.memory.scored import ScoredPolicy
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.window import WindowPolicy


def create_policy(
    config: MemoryConfig | None = None,
    *,
    client: CompletionClient | None = None,
    summarizer: Summarizer | None = None,
) -> MemoryPolicy:
    """Instantiate the policy described by ``config``.

    Parameters
    ----------
    config:
        Policy selection and parameters.  Defaults to ``MemoryConfig()``
        (a buffer policy).
    client:
        Completion client used to build an ``LLMSummarizer`` for the
        summary policy when ``summarizer`` is not given.
    summarizer:
        Explicit summarizer for the summary policy.  When neither this nor
        ``client`` is given, an offline ``ExtractiveSummarizer`` is used.

    Returns
    -------
    MemoryPolicy
        A new, empty policy instance.

    Raises
    ------
    ConfigurationError
        If the configuration names an unknown policy or invalid parameters.
    """
    config = config or MemoryConfig()
    render_options = {"human_prefix": config.human_prefix, "ai_prefix": config.ai_prefix}

    if config.policy is PolicyKind.BUFFER:
        return BufferPolicy(**render_options)
    if config.policy is PolicyKind.WINDOW:
        return WindowPolicy(k=config.window_k, **render_options)
    if config.policy is PolicyKind.SCORED:
        return ScoredPolicy(capacity=config.capacity, prune_to=config.prune_to, **render_options)
    if config.policy is PolicyKind.SUMMARY:
        if summarizer is None:
            if client is not None:
                summarizer = LLMSummarizer(client, **render_options)
            else:
                summarizer = ExtractiveSummarizer(
                    max_tokens=config.max_summary_tokens, **render_options
                )
        return SummaryPolicy(
            summarizer,
            summarize_every=config.summarize_every,
            **render_options,
        )
    raise ConfigurationError(f"Unknown memory policy: {config.policy!r}")

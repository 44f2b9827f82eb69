"""Side-by-side metrics for retention policies.

Reports how much context each policy would hand to the model after the
same conversation: message and turn counts, character and token size, and
a qualitative cost profile.

Classes
-------
- CostProfile   — qualitative latency/cost class of a policy
- PolicyReport  — metrics for one policy

Functions
---------
- compare         — report on already-fed policies without touching them
- run_comparison  — feed the same turns to each policy, then report
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from enum import Enum

from pydantic import BaseModel, Field

from conversation_memory.context.summarizer import estimate_tokens
from conversation_memory.errors import SummarizationError
from conversation_memory.memory.base import MemoryPolicy, PolicyKind
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.turn import Turn

logger = logging.getLogger(__name__)


class CostProfile(str, Enum):
    """How a policy's prompt cost behaves as the conversation grows."""

    GROWING = "growing"
    FLAT = "flat"
    EXTRA_LLM = "extra_llm"
    BOUNDED = "bounded"

    @property
    def description(self) -> str:
        return _PROFILE_DESCRIPTIONS[self]


_PROFILE_DESCRIPTIONS: dict[CostProfile, str] = {
    CostProfile.GROWING: "cheap to maintain, prompt grows with every turn",
    CostProfile.FLAT: "fixed-size prompt, simple truncation",
    CostProfile.EXTRA_LLM: "compact prompt, one extra model call per summarization",
    CostProfile.BOUNDED: "capacity-bounded prompt, pruning by importance",
}

_KIND_PROFILES: dict[PolicyKind, CostProfile] = {
    PolicyKind.BUFFER: CostProfile.GROWING,
    PolicyKind.WINDOW: CostProfile.FLAT,
    PolicyKind.SUMMARY: CostProfile.EXTRA_LLM,
    PolicyKind.SCORED: CostProfile.BOUNDED,
}


class PolicyReport(BaseModel):
    """Metrics describing one policy's retained context.

    Parameters
    ----------
    name:
        Label the caller gave this policy.
    kind:
        The policy's strategy.
    message_count:
        Chat messages the policy would hand to the model.
    turn_count:
        Turns the policy exposes (for summary: turns the digest covers).
    context_chars:
        Length of ``policy.context()``.
    serialized_chars:
        Length of the JSON-serialized message sequence.
    estimated_tokens:
        Rough token count of ``policy.context()`` (0 when empty).
    relative_size:
        ``serialized_chars`` as a percentage of the largest report.
    cost_profile:
        Qualitative cost class.
    summarizer_calls:
        Extra model calls spent on summarization.
    errors:
        Failures recorded while feeding turns.
    """

    name: str
    kind: PolicyKind
    message_count: int
    turn_count: int
    context_chars: int
    serialized_chars: int
    estimated_tokens: int
    relative_size: float = 100.0
    cost_profile: CostProfile
    summarizer_calls: int = 0
    errors: list[str] = Field(default_factory=list)


def _report(name: str, policy: MemoryPolicy) -> PolicyReport:
    context = policy.context()
    messages = policy.messages()
    serialized = json.dumps([message.model_dump() for message in messages])
    summarizer_calls = policy.summarizer_calls if isinstance(policy, SummaryPolicy) else 0
    return PolicyReport(
        name=name,
        kind=policy.kind,
        message_count=len(messages),
        turn_count=policy.stats().total_turns,
        context_chars=len(context),
        serialized_chars=len(serialized),
        estimated_tokens=estimate_tokens(context) if context else 0,
        cost_profile=_KIND_PROFILES[policy.kind],
        summarizer_calls=summarizer_calls,
    )


def compare(policies: Mapping[str, MemoryPolicy]) -> list[PolicyReport]:
    """Report on each policy in ``policies``, preserving mapping order.

    Only reads the policies.
    """
    reports = [_report(name, policy) for name, policy in policies.items()]
    largest = max((report.serialized_chars for report in reports), default=0)
    for report in reports:
        if largest:
            report.relative_size = round(report.serialized_chars / largest * 100, 1)
    return reports


def run_comparison(
    policies: Mapping[str, MemoryPolicy],
    turns: Iterable[Turn],
) -> list[PolicyReport]:
    """Feed ``turns`` in order to every policy, then ``compare`` them.

    Summarization failures do not abort the run; they are recorded on the
    affected policy's report.  Other errors propagate.
    """
    ordered = list(turns)
    failures: dict[str, list[str]] = {name: [] for name in policies}
    for turn in ordered:
        for name, policy in policies.items():
            try:
                policy.append(turn)
            except SummarizationError as exc:
                logger.warning("run_comparison: %s failed to summarize: %s", name, exc)
                failures[name].append(str(exc))

    reports = compare(policies)
    for report in reports:
        report.errors = failures[report.name]
    return reports

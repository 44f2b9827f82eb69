"""Unit tests for conversation_memory.analytics.comparison."""
from __future__ import annotations

from collections.abc import Sequence

from conversation_memory.analytics.comparison import CostProfile, compare, run_comparison
from conversation_memory.context.summarizer import ExtractiveSummarizer
from conversation_memory.errors import ServiceError
from conversation_memory.memory.base import MemoryPolicy, PolicyKind
from conversation_memory.memory.buffer import BufferPolicy
from conversation_memory.memory.scored import ScoredPolicy
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.turn import Turn
from conversation_memory.memory.window import WindowPolicy
from conversation_memory.samples import sample_turns


class _BrokenSummarizer:
    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        raise ServiceError("service unavailable", kind="server")


def _make_policies() -> dict[str, MemoryPolicy]:
    return {
        "buffer": BufferPolicy(),
        "window": WindowPolicy(k=2),
        "summary": SummaryPolicy(ExtractiveSummarizer()),
        "scored": ScoredPolicy(capacity=4),
    }


class TestRunComparison:
    def test_report_per_policy_in_order(self) -> None:
        reports = run_comparison(_make_policies(), sample_turns())
        assert [r.name for r in reports] == ["buffer", "window", "summary", "scored"]
        assert [r.kind for r in reports] == [
            PolicyKind.BUFFER,
            PolicyKind.WINDOW,
            PolicyKind.SUMMARY,
            PolicyKind.SCORED,
        ]

    def test_counts_on_sample_conversation(self) -> None:
        reports = {r.name: r for r in run_comparison(_make_policies(), sample_turns())}
        assert reports["buffer"].message_count == 12
        assert reports["buffer"].turn_count == 6
        assert reports["window"].message_count == 4
        assert reports["window"].turn_count == 2
        assert reports["summary"].message_count == 1
        assert reports["summary"].turn_count == 6
        assert reports["summary"].summarizer_calls == 6
        assert reports["scored"].message_count == 8

    def test_buffer_is_largest(self) -> None:
        reports = {r.name: r for r in run_comparison(_make_policies(), sample_turns())}
        assert reports["buffer"].relative_size == 100.0
        assert reports["window"].relative_size < 100.0
        assert reports["window"].serialized_chars < reports["buffer"].serialized_chars

    def test_cost_profiles(self) -> None:
        reports = {r.name: r for r in run_comparison(_make_policies(), sample_turns())}
        assert reports["buffer"].cost_profile is CostProfile.GROWING
        assert reports["window"].cost_profile is CostProfile.FLAT
        assert reports["summary"].cost_profile is CostProfile.EXTRA_LLM
        assert reports["scored"].cost_profile is CostProfile.BOUNDED
        assert "prompt" in CostProfile.GROWING.description

    def test_summarization_failures_recorded(self) -> None:
        policies: dict[str, MemoryPolicy] = {
            "buffer": BufferPolicy(),
            "summary": SummaryPolicy(_BrokenSummarizer()),
        }
        reports = {r.name: r for r in run_comparison(policies, sample_turns()[:2])}
        assert len(reports["summary"].errors) == 2
        assert reports["buffer"].errors == []
        assert reports["summary"].message_count == 0
        assert reports["buffer"].turn_count == 2


class TestCompare:
    def test_empty_policies(self) -> None:
        reports = compare({"buffer": BufferPolicy()})
        assert reports[0].message_count == 0
        assert reports[0].estimated_tokens == 0
        assert reports[0].relative_size == 100.0

    def test_does_not_modify_policies(self) -> None:
        memory = BufferPolicy()
        memory.save("q", "a")
        compare({"buffer": memory})
        assert len(memory) == 1

    def test_no_policies(self) -> None:
        assert compare({}) == []

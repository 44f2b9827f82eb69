"""Unit tests for conversation_memory.memory.summary."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

import pytest

from conversation_memory.errors import (
    ConfigurationError,
    ServiceError,
    SummarizationError,
)
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.turn import Turn


class _JoiningSummarizer:
    """Appends each new human line to the digest."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []

    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        self.calls.append((digest, len(turns)))
        parts = [digest] if digest else []
        parts.extend(turn.human_text for turn in turns)
        return " | ".join(parts)


class _FlakySummarizer(_JoiningSummarizer):
    """Fails while ``failing`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = False

    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        if self.failing:
            raise ServiceError("upstream timed out", kind="timeout")
        return super().summarize(digest, turns)


class TestSummaryPolicyConstruction:
    @pytest.mark.parametrize("every", [0, -1, 1.0])
    def test_invalid_summarize_every(self, every: object) -> None:
        with pytest.raises(ConfigurationError):
            SummaryPolicy(_JoiningSummarizer(), summarize_every=every)  # type: ignore[arg-type]

    def test_missing_summarizer(self) -> None:
        with pytest.raises(ConfigurationError):
            SummaryPolicy(None)  # type: ignore[arg-type]

    def test_fresh_state(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer())
        assert memory.digest == ""
        assert memory.context() == ""
        assert memory.messages() == []


class TestSummaryPolicyDigest:
    def test_summarizes_every_append_by_default(self) -> None:
        summarizer = _JoiningSummarizer()
        memory = SummaryPolicy(summarizer)
        memory.save("one", "a")
        memory.save("two", "b")
        assert memory.digest == "one | two"
        assert summarizer.calls == [("", 1), ("one", 1)]
        assert memory.summarizer_calls == 2

    def test_context_is_digest(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer())
        memory.save("one", "a")
        assert memory.context() == "one"

    def test_context_ignores_filters(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer())
        memory.save("one", "a", category="personal")
        assert memory.context(category="technical", min_importance=9) == "one"

    def test_messages_single_system_message(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer())
        memory.save("one", "a")
        messages = memory.messages()
        assert len(messages) == 1
        assert messages[0].role == "system"
        assert messages[0].content == "one"

    def test_batched_summarization(self) -> None:
        summarizer = _JoiningSummarizer()
        memory = SummaryPolicy(summarizer, summarize_every=3)
        memory.save("one", "a")
        memory.save("two", "b")
        assert memory.digest == ""
        assert len(memory.pending) == 2
        memory.save("three", "c")
        assert memory.digest == "one | two | three"
        assert memory.pending == ()
        assert summarizer.calls == [("", 3)]

    def test_flush_folds_pending(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer(), summarize_every=5)
        memory.save("one", "a")
        assert memory.flush() == "one"
        assert memory.pending == ()

    def test_flush_without_pending_does_not_call(self) -> None:
        summarizer = _JoiningSummarizer()
        memory = SummaryPolicy(summarizer, summarize_every=5)
        assert memory.flush() == ""
        assert summarizer.calls == []


class TestSummaryPolicyFailure:
    def test_failure_keeps_previous_digest(self) -> None:
        summarizer = _FlakySummarizer()
        memory = SummaryPolicy(summarizer)
        memory.save("one", "a")
        summarizer.failing = True
        with pytest.raises(SummarizationError) as exc_info:
            memory.save("two", "b")
        assert memory.digest == "one"
        assert memory.context() == "one"
        assert exc_info.value.kind == "timeout"
        assert exc_info.value.pending_turns == 1
        assert isinstance(exc_info.value.cause, ServiceError)

    def test_summarization_error_is_service_error(self) -> None:
        summarizer = _FlakySummarizer()
        summarizer.failing = True
        memory = SummaryPolicy(summarizer)
        with pytest.raises(ServiceError):
            memory.save("one", "a")

    def test_failed_turn_is_retried_later(self) -> None:
        summarizer = _FlakySummarizer()
        memory = SummaryPolicy(summarizer)
        memory.save("one", "a")
        summarizer.failing = True
        with pytest.raises(SummarizationError):
            memory.save("two", "b")
        assert [t.human_text for t in memory.pending] == ["two"]
        summarizer.failing = False
        memory.save("three", "c")
        assert memory.digest == "one | two | three"
        assert memory.pending == ()

    def test_failure_does_not_count_call(self) -> None:
        summarizer = _FlakySummarizer()
        summarizer.failing = True
        memory = SummaryPolicy(summarizer)
        with pytest.raises(SummarizationError):
            memory.save("one", "a")
        assert memory.summarizer_calls == 0


class TestSummaryPolicyStats:
    def test_stats_cover_summarized_and_pending(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer(), summarize_every=2)
        memory.save("one", "a", importance=3, category="personal")
        memory.save("two", "b", importance=1, category="technical")
        memory.save("three", "c", importance=2, category="technical")
        stats = memory.stats()
        assert stats.total_turns == 3
        assert stats.stored_turns == 1
        assert stats.categories == {"personal", "technical"}
        assert stats.average_importance == 2.0
        assert stats.digest_chars == len("one | two")
        assert stats.oldest_timestamp is not None

    def test_empty_stats(self) -> None:
        stats = SummaryPolicy(_JoiningSummarizer()).stats()
        assert stats.total_turns == 0
        assert stats.average_importance == 0.0
        assert stats.oldest_timestamp is None

    def test_clear(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer(), summarize_every=2)
        memory.save("one", "a")
        memory.save("two", "b")
        memory.save("three", "c")
        memory.clear()
        assert memory.digest == ""
        assert memory.pending == ()
        assert memory.summarizer_calls == 0
        assert memory.stats().total_turns == 0
        memory.save("four", "d")
        memory.save("five", "e")
        assert memory.digest == "four | five"

    def test_repr(self) -> None:
        assert "pending=0" in repr(SummaryPolicy(_JoiningSummarizer()))

    def test_len_counts_summarized_turns(self) -> None:
        memory = SummaryPolicy(_JoiningSummarizer())
        memory.save("one", "a")
        memory.save("two", "b")
        assert memory.pending == ()
        assert len(memory) == 2 == memory.stats().total_turns


class TestSummaryPolicyTimestamps:
    def test_out_of_order_turn_restamped_after_summarization(self) -> None:
        now = datetime.now(timezone.utc)
        memory = SummaryPolicy(_JoiningSummarizer())
        memory.append(Turn(human_text="one", ai_text="a", timestamp=now))
        assert memory.pending == ()
        stored = memory.append(
            Turn(human_text="two", ai_text="b", timestamp=now - timedelta(minutes=5))
        )
        assert stored.timestamp == now

    def test_out_of_order_turn_restamped_while_pending(self) -> None:
        now = datetime.now(timezone.utc)
        memory = SummaryPolicy(_JoiningSummarizer(), summarize_every=3)
        memory.append(Turn(human_text="one", ai_text="a", timestamp=now))
        memory.append(Turn(human_text="two", ai_text="b", timestamp=now - timedelta(seconds=1)))
        assert [t.timestamp for t in memory.pending] == [now, now]

    def test_clear_forgets_last_timestamp(self) -> None:
        now = datetime.now(timezone.utc)
        memory = SummaryPolicy(_JoiningSummarizer(), summarize_every=2)
        memory.append(Turn(human_text="one", ai_text="a", timestamp=now))
        memory.clear()
        earlier = now - timedelta(hours=1)
        stored = memory.append(Turn(human_text="two", ai_text="b", timestamp=earlier))
        assert stored.timestamp == earlier

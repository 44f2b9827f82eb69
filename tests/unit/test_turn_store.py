"""Unit tests for conversation_memory.memory.turn."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from conversation_memory.memory.turn import ChatMessage, Turn, TurnStore, render_turns


def _make_turn(index: int, **fields: object) -> Turn:
    return Turn(human_text=f"question {index}", ai_text=f"answer {index}", **fields)


# ---------------------------------------------------------------------------
# Turn
# ---------------------------------------------------------------------------


class TestTurn:
    def test_defaults(self) -> None:
        turn = _make_turn(1)
        assert turn.importance == 1
        assert turn.category == "general"
        assert turn.timestamp.tzinfo is not None

    def test_is_immutable(self) -> None:
        turn = _make_turn(1)
        with pytest.raises(ValidationError):
            turn.human_text = "changed"  # type: ignore[misc]

    def test_importance_below_one_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_turn(1, importance=0)

    def test_empty_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_turn(1, category="")

    def test_render_default_prefixes(self) -> None:
        turn = Turn(human_text="hi", ai_text="hello")
        assert turn.render() == "human: hi\nassistant: hello"

    def test_render_custom_prefixes(self) -> None:
        turn = Turn(human_text="hi", ai_text="hello")
        assert turn.render("Human", "AI") == "Human: hi\nAI: hello"

    def test_to_messages(self) -> None:
        messages = Turn(human_text="hi", ai_text="hello").to_messages()
        assert messages == [
            ChatMessage(role="human", content="hi"),
            ChatMessage(role="assistant", content="hello"),
        ]


class TestRenderTurns:
    def test_blank_line_between_turns(self) -> None:
        text = render_turns([Turn(human_text="a", ai_text="b"), Turn(human_text="c", ai_text="d")])
        assert text == "human: a\nassistant: b\n\nhuman: c\nassistant: d"

    def test_empty(self) -> None:
        assert render_turns([]) == ""


# ---------------------------------------------------------------------------
# TurnStore
# ---------------------------------------------------------------------------


class TestTurnStore:
    def test_append_preserves_insertion_order(self) -> None:
        store = TurnStore()
        turns = [_make_turn(i) for i in range(5)]
        for turn in turns:
            store.append(turn)
        assert [t.human_text for t in store.all()] == [t.human_text for t in turns]

    def test_all_returns_tuple(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        assert isinstance(store.all(), tuple)

    def test_all_is_restartable(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        view = store.all()
        assert list(view) == list(view)

    def test_all_is_a_snapshot(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        view = store.all()
        store.append(_make_turn(2))
        assert len(view) == 1
        assert len(store) == 2

    def test_last(self) -> None:
        store = TurnStore()
        for i in range(5):
            store.append(_make_turn(i))
        assert [t.human_text for t in store.last(2)] == ["question 3", "question 4"]

    def test_last_more_than_stored(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        assert len(store.last(10)) == 1

    def test_last_zero(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        assert store.last(0) == ()

    def test_out_of_order_timestamp_is_restamped(self) -> None:
        now = datetime.now(timezone.utc)
        store = TurnStore()
        store.append(_make_turn(1, timestamp=now))
        stored = store.append(_make_turn(2, timestamp=now - timedelta(hours=1)))
        assert stored.timestamp == now
        timestamps = [t.timestamp for t in store.all()]
        assert timestamps == sorted(timestamps)

    def test_in_order_timestamp_kept(self) -> None:
        now = datetime.now(timezone.utc)
        store = TurnStore()
        store.append(_make_turn(1, timestamp=now))
        later = now + timedelta(seconds=5)
        stored = store.append(_make_turn(2, timestamp=later))
        assert stored.timestamp == later

    def test_entries_carry_increasing_sequence(self) -> None:
        store = TurnStore()
        for i in range(3):
            store.append(_make_turn(i))
        assert [seq for seq, _ in store.entries()] == [0, 1, 2]

    def test_replace_restores_sequence_order(self) -> None:
        store = TurnStore()
        for i in range(4):
            store.append(_make_turn(i))
        entries = store.entries()
        store.replace([entries[3], entries[0]])
        assert [t.human_text for t in store.all()] == ["question 0", "question 3"]

    def test_clear_is_idempotent(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        store.clear()
        store.clear()
        assert len(store) == 0
        assert store.all() == ()

    def test_clear_resets_sequence(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        store.clear()
        store.append(_make_turn(2))
        assert store.entries()[0][0] == 0

    def test_iter(self) -> None:
        store = TurnStore()
        store.append(_make_turn(1))
        assert [t.human_text for t in store] == ["question 1"]

    def test_repr(self) -> None:
        assert "turns=0" in repr(TurnStore())

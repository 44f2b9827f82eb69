"""Unit tests for conversation_memory.chain."""
from __future__ import annotations

from collections.abc import Sequence

import pytest

from conversation_memory.chain import ConversationChain
from conversation_memory.errors import ServiceError, TemplateError
from conversation_memory.llm.base import ScriptedClient
from conversation_memory.memory.buffer import BufferPolicy
from conversation_memory.memory.scored import ScoredPolicy
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.turn import Turn
from conversation_memory.memory.window import WindowPolicy


class _BrokenSummarizer:
    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        raise ServiceError("summary model down", kind="server")


class TestConversationChainConstruction:
    def test_template_must_declare_history_and_input(self) -> None:
        with pytest.raises(TemplateError) as exc_info:
            ConversationChain(ScriptedClient(), BufferPolicy(), template="Only {input}")
        assert exc_info.value.missing == ("history",)


class TestConversationChainPredict:
    def test_first_turn_has_no_history(self) -> None:
        client = ScriptedClient(["Nice to meet you, Alice!"])
        chain = ConversationChain(client, BufferPolicy())
        result = chain.predict("My name is Alice")
        assert result.response == "Nice to meet you, Alice!"
        assert not result.context_used
        assert result.stats.total_turns == 1
        assert "Current Input: My name is Alice" in client.prompts[0]

    def test_history_sent_on_later_turns(self) -> None:
        client = ScriptedClient(["Hi Alice", "Your name is Alice"])
        chain = ConversationChain(client, BufferPolicy())
        chain.predict("My name is Alice")
        result = chain.predict("What's my name?")
        assert result.context_used
        assert "human: My name is Alice\nassistant: Hi Alice" in client.prompts[1]

    def test_window_limits_history(self) -> None:
        client = ScriptedClient()
        chain = ConversationChain(client, WindowPolicy(k=1))
        chain.predict("first message")
        chain.predict("second message")
        chain.predict("third message")
        assert "first message" not in client.prompts[2].split("Current Input")[0]
        assert "second message" in client.prompts[2]

    def test_turn_metadata_and_filters(self) -> None:
        client = ScriptedClient()
        memory = ScoredPolicy()
        chain = ConversationChain(client, memory)
        chain.predict("I love hiking", importance=3, category="personal")
        chain.predict("I use Rust", importance=1, category="technical")
        chain.predict("Plan my weekend", filter_category="personal")
        history = client.prompts[2].split("Current Input")[0]
        assert "hiking" in history
        assert "Rust" not in history
        assert memory.all()[0].importance == 3

    def test_service_error_leaves_memory_unchanged(self) -> None:
        memory = BufferPolicy()
        chain = ConversationChain(ScriptedClient([ServiceError("timed out", kind="timeout")]), memory)
        with pytest.raises(ServiceError):
            chain.predict("hello")
        assert len(memory) == 0

    def test_summarization_failure_still_returns_reply(self) -> None:
        memory = SummaryPolicy(_BrokenSummarizer())
        chain = ConversationChain(ScriptedClient(["Hello!"]), memory)
        result = chain.predict("hi")
        assert result.response == "Hello!"
        assert result.memory_error is not None
        assert "summary model down" in result.memory_error
        assert len(memory.pending) == 1

    def test_call_returns_response(self) -> None:
        chain = ConversationChain(ScriptedClient(["pong"]), BufferPolicy())
        assert chain("ping") == "pong"

    def test_custom_template(self) -> None:
        client = ScriptedClient()
        chain = ConversationChain(client, BufferPolicy(), template="H[{history}] I[{input}]")
        chain.predict("hello")
        assert client.prompts == ["H[] I[hello]"]

#!/usr/bin/env python3
"""Example: Conversation Chain

Runs a short conversation through ConversationChain.  With OPENAI_API_KEY
set the chat-completions API is used; otherwise a scripted offline client
stands in for the model.

Usage:
    python examples/03_conversation_chain.py

Requirements:
    pip install conversation-memory
"""
from __future__ import annotations

import os

from conversation_memory import (
    ConversationChain,
    OpenAIChatClient,
    ScriptedClient,
    WindowPolicy,
)


def main() -> None:
    if os.environ.get("OPENAI_API_KEY"):
        client = OpenAIChatClient(system_prompt="You are a friendly assistant.")
    else:
        client = ScriptedClient(
            [
                "Nice to meet you, Alice!",
                "Python and JavaScript are both great choices.",
                "Your name is Alice.",
            ]
        )

    chain = ConversationChain(client, WindowPolicy(k=2))
    for message in ("My name is Alice", "I mainly use Python and JavaScript", "What's my name?"):
        result = chain.predict(message)
        print(f"you> {message}")
        print(f"assistant> {result.response}")
        print(f"  (history sent: {result.context_used}, turns retained: {result.stats.total_turns})")


if __name__ == "__main__":
    main()

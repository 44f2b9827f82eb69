#!/usr/bin/env python3
"""Example: Quickstart — conversation-memory

Minimal working example: record a few exchanges with each retention
policy and print the context each one would hand to a model.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install conversation-memory
"""
from __future__ import annotations

import conversation_memory
from conversation_memory import Conversation


def main() -> None:
    print(f"conversation-memory version: {conversation_memory.__version__}")

    # Step 1: Buffer memory keeps every exchange
    convo = Conversation()
    convo.save("My name is Alice", "Nice to meet you, Alice!")
    convo.save("I work as a software engineer", "That's a great profession!")
    print("\nBuffer context:")
    print(convo.context())

    # Step 2: Window memory keeps only the last k exchanges
    window = Conversation(policy="window", k=1)
    window.save("My name is Alice", "Nice to meet you, Alice!")
    window.save("I mainly use Python", "Excellent choice!")
    print("\nWindow context (k=1):")
    print(window.context())

    # Step 3: Scored memory keeps the most important exchanges
    scored = Conversation(policy="scored", capacity=2)
    scored.save("My name is Alice", "Hi Alice", importance=3, category="personal")
    scored.save("Nice weather today", "Indeed", importance=1)
    scored.save("I build e-commerce apps", "Great field", importance=2, category="technical")
    print("\nScored context (newest first):")
    print(scored.context())
    stats = scored.stats()
    print(f"  turns={stats.total_turns} avg importance={stats.average_importance}")


if __name__ == "__main__":
    main()

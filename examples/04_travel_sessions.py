#!/usr/bin/env python3
"""Example: Per-User Travel Planning Sessions

Keeps a separate scored memory and profile for each traveller, then pulls
only the high-importance travel context for a follow-up question.

Usage:
    python examples/04_travel_sessions.py

Requirements:
    pip install conversation-memory
"""
from __future__ import annotations

from conversation_memory import MemoryConfig, SessionRegistry, assemble


def main() -> None:
    registry = SessionRegistry(config=MemoryConfig(policy="scored", capacity=5))

    alice = registry.get_or_create("alice")
    alice.update_profile(budget="mid-range", interests=["food", "museums"])
    alice.record("I want to visit Tokyo in April", "Cherry blossom season!", importance=3, category="travel")
    alice.record("Is the weather nice?", "Mild and pleasant.", importance=1, category="travel")
    alice.record("I'm vegetarian", "Noted for restaurant picks.", importance=3, category="preferences")

    bob = registry.get_or_create("bob")
    bob.record("Planning a ski trip to Chamonix", "Great choice for skiing.", importance=2, category="travel")

    payload = assemble(alice.memory, "Build me a 3-day itinerary", category="travel", min_importance=2)
    print("Context for Alice's itinerary request:")
    print(payload.history)
    print(f"\nProfile: {alice.profile}")

    for session in registry.sessions():
        stats = session.memory.stats()
        print(
            f"{session.user_id}: {session.conversation_count} conversation(s), "
            f"categories={sorted(stats.categories)}"
        )


if __name__ == "__main__":
    main()

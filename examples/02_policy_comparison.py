#!/usr/bin/env python3
"""Example: Comparing Retention Policies

Feeds the built-in six-exchange conversation to all four policies and
prints how much context each would send to the model.

Usage:
    python examples/02_policy_comparison.py

Requirements:
    pip install conversation-memory
"""
from __future__ import annotations

from conversation_memory import (
    BufferPolicy,
    ExtractiveSummarizer,
    ScoredPolicy,
    SummaryPolicy,
    WindowPolicy,
    run_comparison,
)
from conversation_memory.samples import sample_turns


def main() -> None:
    policies = {
        "buffer": BufferPolicy(),
        "window": WindowPolicy(k=2),
        "summary": SummaryPolicy(ExtractiveSummarizer(max_tokens=64)),
        "scored": ScoredPolicy(capacity=4),
    }
    reports = run_comparison(policies, sample_turns())

    print(f"{'policy':<8} {'messages':>8} {'chars':>6} {'size':>6}  profile")
    for report in reports:
        print(
            f"{report.name:<8} {report.message_count:>8} {report.serialized_chars:>6} "
            f"{report.relative_size:>5.0f}%  {report.cost_profile.description}"
        )

    # What does the model actually see with a window of two?
    print("\nWindow context:")
    print(policies["window"].context())

    print("\nSummary digest:")
    print(policies["summary"].context())


if __name__ == "__main__":
    main()

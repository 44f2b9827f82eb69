"""Benchmark: append + context latency per retention policy — p50/p99.

Feeds the same stream of turns to each policy and times one
``append`` followed by one ``context()`` render, the work a conversation
chain does per exchange.  The summary policy uses the offline extractive
summarizer so no network calls are made.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conversation_memory.config import MemoryConfig
from conversation_memory.memory.factory import create_policy
from conversation_memory.memory.turn import Turn

_WARMUP: int = 50
_ITERATIONS: int = 1_000
_POLICIES: tuple[str, ...] = ("buffer", "window", "summary", "scored")


def _make_turn(index: int) -> Turn:
    return Turn(
        human_text=f"Message {index} asks about topic {index % 17}.",
        ai_text=f"Reply {index} explains topic {index % 17} in a sentence or two.",
        importance=index % 3 + 1,
        category="technical" if index % 2 else "personal",
    )


def bench_policy(policy_name: str) -> dict[str, object]:
    """Benchmark append+context latency for one policy.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_latency_ms, p99_latency_ms, context_chars.
    """
    memory = create_policy(MemoryConfig(policy=policy_name, window_k=5, capacity=10))

    for i in range(_WARMUP):
        memory.append(_make_turn(i))

    latencies_ms: list[float] = []
    for i in range(_WARMUP, _WARMUP + _ITERATIONS):
        turn = _make_turn(i)
        t0 = time.perf_counter()
        memory.append(turn)
        memory.context()
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": f"{policy_name}_append_context",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "context_chars": len(memory.context()),
    }
    print(
        f"[bench_policy_latency] {result['operation']}: "
        f"p50={result['p50_latency_ms']:.4f}ms  "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"context={result['context_chars']} chars"
    )
    return result


def run_benchmark() -> list[dict[str, object]]:
    """Entry point returning one result dict per policy."""
    return [bench_policy(name) for name in _POLICIES]


if __name__ == "__main__":
    results = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "policy_latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(results, fh, indent=2)
    print(f"Results saved to {output_path}")

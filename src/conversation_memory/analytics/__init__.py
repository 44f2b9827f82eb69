"""Policy comparison and reporting."""
from __future__ import annotations

from conversation_memory.analytics.comparison import (
    CostProfile,
    PolicyReport,
    compare,
    run_comparison,
)

__all__ = [
    "CostProfile",
    "PolicyReport",
    "compare",
    "run_comparison",
]

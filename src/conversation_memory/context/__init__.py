"""Context processing subpackage.

Renders retained memory into prompt payloads and compresses old turns.

Public surface
--------------
- PromptPayload, assemble, assemble_messages  — context assembly
- PromptTemplate                              — named-placeholder templates
- Summarizer, LLMSummarizer, ExtractiveSummarizer  — digest builders
"""
from __future__ import annotations

from conversation_memory.context.assembler import PromptPayload, assemble, assemble_messages
from conversation_memory.context.summarizer import (
    ExtractiveSummarizer,
    LLMSummarizer,
    Summarizer,
)
from conversation_memory.context.template import PromptTemplate

__all__ = [
    "ExtractiveSummarizer",
    "LLMSummarizer",
    "PromptPayload",
    "PromptTemplate",
    "Summarizer",
    "assemble",
    "assemble_messages",
]

"""conversation-memory — retention strategies for conversational context.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import conversation_memory
>>> conversation_memory.__version__
'0.1.0'
"""
from __future__ import annotations

# Errors
from conversation_memory.errors import (
    ConfigurationError,
    ConversationMemoryError,
    ServiceError,
    SummarizationError,
    TemplateError,
)

# Memory policies
from conversation_memory.memory.turn import ChatMessage, Turn, TurnStore
from conversation_memory.memory.base import MemoryPolicy, MemoryStats, PolicyKind
from conversation_memory.memory.buffer import BufferPolicy
from conversation_memory.memory.window import WindowPolicy
from conversation_memory.memory.summary import SummaryPolicy
from conversation_memory.memory.scored import ScoredPolicy
from conversation_memory.memory.factory import create_policy

# Configuration
from conversation_memory.config import ClientConfig, MemoryConfig, load_config

# Context processing
from conversation_memory.context.assembler import PromptPayload, assemble, assemble_messages
from conversation_memory.context.template import PromptTemplate
from conversation_memory.context.summarizer import (
    ExtractiveSummarizer,
    LLMSummarizer,
    Summarizer,
)

# Text generation
from conversation_memory.llm.base import CompletionClient, ScriptedClient
from conversation_memory.llm.openai_client import OpenAIChatClient

# Analytics
from conversation_memory.analytics.comparison import (
    CostProfile,
    PolicyReport,
    compare,
    run_comparison,
)

# Conversation flow
from conversation_memory.chain import ChainResult, ConversationChain
from conversation_memory.sessions import ConversationSession, SessionNotFoundError, SessionRegistry
from conversation_memory.convenience import Conversation

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "ConversationMemoryError",
    "ServiceError",
    "SummarizationError",
    "TemplateError",
    # Memory
    "BufferPolicy",
    "ChatMessage",
    "MemoryPolicy",
    "MemoryStats",
    "PolicyKind",
    "ScoredPolicy",
    "SummaryPolicy",
    "Turn",
    "TurnStore",
    "WindowPolicy",
    "create_policy",
    # Configuration
    "ClientConfig",
    "MemoryConfig",
    "load_config",
    # Context
    "ExtractiveSummarizer",
    "LLMSummarizer",
    "PromptPayload",
    "PromptTemplate",
    "Summarizer",
    "assemble",
    "assemble_messages",
    # Text generation
    "CompletionClient",
    "OpenAIChatClient",
    "ScriptedClient",
    # Analytics
    "CostProfile",
    "PolicyReport",
    "compare",
    "run_comparison",
    # Conversation flow
    "ChainResult",
    "Conversation",
    "ConversationChain",
    "ConversationSession",
    "SessionNotFoundError",
    "SessionRegistry",
]

"""Conversation chain: memory, prompt, model, memory again.

Each ``predict`` call reads the policy's context, renders the prompt,
asks the completion client for a reply, and records the exchange as a new
turn.

Classes
-------
- ChainResult        — reply plus memory bookkeeping for one call
- ConversationChain  — the read → render → complete → append loop
"""
from __future__ import annotations

import logging

from pydantic import BaseModel

from conversation_memory.context.assembler import assemble
from conversation_memory.context.template import PromptTemplate
from conversation_memory.errors import SummarizationError, TemplateError
from conversation_memory.llm.base import CompletionClient
from conversation_memory.memory.base import MemoryPolicy, MemoryStats

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_TEMPLATE = """\
Based on our conversation history and the current input, provide a helpful response.

Conversation History:
{history}

Current Input: {input}

Please provide a contextual response that acknowledges our conversation history when relevant."""


class ChainResult(BaseModel):
    """Outcome of one ``ConversationChain.predict`` call.

    Parameters
    ----------
    response:
        The model's reply.
    stats:
        Memory statistics after the exchange was recorded.
    context_used:
        Whether any conversation history was sent with the prompt.
    memory_error:
        Description of a summarization failure while recording the
        exchange, or None.  The reply is valid either way.
    """

    response: str
    stats: MemoryStats
    context_used: bool
    memory_error: str | None = None


class ConversationChain:
    """Drive a conversation through a memory policy and a completion client.

    Parameters
    ----------
    client:
        The text-generation collaborator.
    memory:
        The policy holding this conversation's state.  Owned by the caller;
        the chain never shares it.
    template:
        Prompt with ``{history}`` and ``{input}`` placeholders.

    Raises
    ------
    TemplateError
        If the template does not declare both ``history`` and ``input``.
    """

    def __init__(
        self,
        client: CompletionClient,
        memory: MemoryPolicy,
        template: PromptTemplate | str = DEFAULT_CONVERSATION_TEMPLATE,
    ) -> None:
        self.client = client
        self.memory = memory
        self.template = template if isinstance(template, PromptTemplate) else PromptTemplate(template)
        missing = {"history", "input"} - set(self.template.input_variables)
        if missing:
            raise TemplateError(
                f"Conversation template must use {{history}} and {{input}}; "
                f"missing: {', '.join(sorted(missing))}",
                missing=tuple(sorted(missing)),
            )

    def predict(
        self,
        user_input: str,
        *,
        importance: int = 1,
        category: str = "general",
        filter_category: str | None = None,
        min_importance: int | None = None,
    ) -> ChainResult:
        """Answer ``user_input`` and remember the exchange.

        Parameters
        ----------
        user_input:
            The new human message.
        importance, category:
            Stored on the recorded turn.
        filter_category, min_importance:
            Restrict which retained turns are sent as history.

        Returns
        -------
        ChainResult

        Raises
        ------
        ServiceError
            If the completion call fails.  Memory is left unchanged.
        TemplateError
            If the prompt cannot be rendered.
        """
        payload = assemble(
            self.memory,
            user_input,
            category=filter_category,
            min_importance=min_importance,
        )
        prompt = self.template.render(**payload.as_variables())
        response = self.client.complete(prompt)

        memory_error: str | None = None
        try:
            self.memory.save(user_input, response, importance=importance, category=category)
        except SummarizationError as exc:
            logger.warning("ConversationChain: memory update degraded: %s", exc)
            memory_error = str(exc)

        return ChainResult(
            response=response,
            stats=self.memory.stats(),
            context_used=payload.has_history,
            memory_error=memory_error,
        )

    def __call__(self, user_input: str) -> str:
        return self.predict(user_input).response

    def __repr__(self) -> str:
        return f"ConversationChain(memory={self.memory!r})"

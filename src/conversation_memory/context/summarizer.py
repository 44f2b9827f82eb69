"""Summarization adapters used by the Summary policy.

A summarizer compresses the current digest plus newly completed turns
into a new digest.  The new digest must carry everything the old one did.

Classes
-------
- Summarizer            — protocol every adapter satisfies
- LLMSummarizer         — progressive summarization through a completion client
- ExtractiveSummarizer  — offline TF-IDF sentence extraction, no network needed
"""
from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Sequence
from typing import Protocol

from conversation_memory.context.template import PromptTemplate
from conversation_memory.errors import ServiceError, TemplateError
from conversation_memory.llm.base import CompletionClient
from conversation_memory.memory.turn import DEFAULT_AI_PREFIX, DEFAULT_HUMAN_PREFIX, Turn

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    """Compress ``digest`` and ``turns`` into a new digest.

    Implementations raise ``ServiceError`` when the underlying service
    fails.  They must never return a partially updated digest.
    """

    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        ...


def _render_lines(turns: Sequence[Turn], human_prefix: str, ai_prefix: str) -> str:
    return "\n".join(turn.render(human_prefix, ai_prefix) for turn in turns)


# ---------------------------------------------------------------------------
# LLM-backed summarizer
# ---------------------------------------------------------------------------

PROGRESSIVE_SUMMARY_TEMPLATE = """\
Progressively summarize the lines of conversation provided, adding onto the \
previous summary and returning a new summary. Keep every name, preference, \
number and decision mentioned so far.

EXAMPLE
Current summary:
The human asks what the AI thinks of artificial intelligence. The AI thinks \
artificial intelligence is a force for good.

New lines of conversation:
human: Why do you think artificial intelligence is a force for good?
assistant: Because artificial intelligence will help humans reach their full potential.

New summary:
The human asks what the AI thinks of artificial intelligence. The AI thinks \
artificial intelligence is a force for good because it will help humans reach \
their full potential.
END OF EXAMPLE

Current summary:
{summary}

New lines of conversation:
{new_lines}

New summary:"""


class LLMSummarizer:
    """Summarize through a text-generation collaborator.

    Parameters
    ----------
    client:
        Any object with ``complete(prompt) -> str``.
    template:
        Prompt with ``{summary}`` and ``{new_lines}`` placeholders.
    human_prefix, ai_prefix:
        Role labels used when rendering the new turns.

    Raises
    ------
    TemplateError
        If the template does not declare both ``summary`` and ``new_lines``.
    """

    def __init__(
        self,
        client: CompletionClient,
        template: PromptTemplate | str = PROGRESSIVE_SUMMARY_TEMPLATE,
        human_prefix: str = DEFAULT_HUMAN_PREFIX,
        ai_prefix: str = DEFAULT_AI_PREFIX,
    ) -> None:
        self.client = client
        self.template = template if isinstance(template, PromptTemplate) else PromptTemplate(template)
        missing = {"summary", "new_lines"} - set(self.template.input_variables)
        if missing:
            raise TemplateError(
                f"Summary template must use {{summary}} and {{new_lines}}; "
                f"missing: {', '.join(sorted(missing))}",
                missing=tuple(sorted(missing)),
            )
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix

    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        """Ask the client for a new digest covering ``digest`` and ``turns``.

        Raises
        ------
        ServiceError
            If the client fails or returns an empty summary.
        """
        if not turns:
            return digest
        prompt = self.template.render(
            summary=digest,
            new_lines=_render_lines(turns, self.human_prefix, self.ai_prefix),
        )
        new_digest = self.client.complete(prompt).strip()
        if not new_digest:
            raise ServiceError("Summarizer returned an empty summary.", kind="response")
        logger.debug(
            "LLMSummarizer: %d turn(s) folded into %d-char digest",
            len(turns),
            len(new_digest),
        )
        return new_digest


# ---------------------------------------------------------------------------
# Extractive summarizer
# ---------------------------------------------------------------------------

_STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "an", "the", "is", "it", "in", "on", "at", "to", "for",
        "of", "and", "or", "but", "not", "with", "as", "by", "from",
        "this", "that", "was", "are", "be", "been", "have", "has",
        "do", "did", "will", "would", "could", "should", "may", "can",
        "i", "you", "we", "they", "he", "she", "its", "their", "our",
        "so", "if", "then", "just", "also", "about", "there", "here",
        "up", "out", "when", "what", "which", "who", "how", "all",
        "my", "your", "me", "am", "im",
    }
)


def _tokenize(text: str) -> list[str]:
    """Lowercase, split on non-alphanumeric, remove stop words and short tokens."""
    tokens = re.findall(r"[a-z0-9]+", text.lower())
    return [t for t in tokens if t not in _STOP_WORDS and len(t) > 1]


def _split_sentences(text: str) -> list[str]:
    """Split text into sentences on sentence-boundary punctuation and newlines."""
    raw = re.split(r"(?<=[.!?])\s+|\n+", text.strip())
    return [s.strip() for s in raw if s.strip()]


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per ~4 characters."""
    return max(1, len(text) // 4)


def _compute_idf(documents: list[list[str]]) -> dict[str, float]:
    num_docs = len(documents)
    document_freq: Counter[str] = Counter()
    for doc_tokens in documents:
        document_freq.update(set(doc_tokens))
    return {
        term: math.log((1 + num_docs) / (1 + df)) + 1
        for term, df in document_freq.items()
    }


def _tfidf(tokens: list[str], idf: dict[str, float]) -> float:
    if not tokens:
        return 0.0
    counts = Counter(tokens)
    total = len(tokens)
    return sum((count / total) * idf.get(term, 0.0) for term, count in counts.items())


class ExtractiveSummarizer:
    """Offline summarizer that keeps the most informative sentences.

    The previous digest and the new turns are split into sentences, each
    sentence is scored by TF-IDF, and sentences are selected greedily
    within ``max_tokens``.  Selected sentences keep their original order so
    the digest reads naturally.  Sentences from the previous digest get a
    small bonus so that established facts are not displaced by chatter.

    Parameters
    ----------
    max_tokens:
        Token budget for the digest.  Default: 256.
    digest_bonus:
        Multiplier applied to sentences from the previous digest.
        Default: 1.25.
    human_prefix, ai_prefix:
        Role labels used when turning turns into sentences.
    """

    def __init__(
        self,
        max_tokens: int = 256,
        digest_bonus: float = 1.25,
        human_prefix: str = DEFAULT_HUMAN_PREFIX,
        ai_prefix: str = DEFAULT_AI_PREFIX,
    ) -> None:
        self.max_tokens = max_tokens
        self.digest_bonus = digest_bonus
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix

    def summarize(self, digest: str, turns: Sequence[Turn]) -> str:
        sentences: list[tuple[str, bool]] = [(s, True) for s in _split_sentences(digest)]
        for turn in turns:
            for sentence in _split_sentences(turn.human_text):
                sentences.append((f"{self.human_prefix}: {sentence}", False))
            for sentence in _split_sentences(turn.ai_text):
                sentences.append((f"{self.ai_prefix}: {sentence}", False))

        if not sentences:
            return ""

        token_lists = [_tokenize(sentence) for sentence, _ in sentences]
        idf = _compute_idf(token_lists)

        scored: list[tuple[float, int]] = []
        for index, ((_, from_digest), tokens) in enumerate(zip(sentences, token_lists)):
            score = _tfidf(tokens, idf)
            if from_digest:
                score *= self.digest_bonus
            scored.append((score, index))
        scored.sort(key=lambda item: (item[0], -item[1]), reverse=True)

        selected: list[int] = []
        tokens_used = 0
        for _, index in scored:
            sentence_tokens = estimate_tokens(sentences[index][0])
            if tokens_used + sentence_tokens > self.max_tokens and selected:
                continue
            selected.append(index)
            tokens_used += sentence_tokens
            if tokens_used >= self.max_tokens:
                break

        selected.sort()
        return " ".join(sentences[index][0] for index in selected)

"""Query classifier - generic overview vs. specific fact."""

import logging
import re
from typing import Iterable, Optional

from ..models.search import QueryType

logger = logging.getLogger(__name__)

DEFAULT_GENERIC_PHRASES: tuple[str, ...] = (
    "summary",
    "overview",
    "main points",
    "key points",
    "bullet points",
    "what is this document about",
    "what is this pdf about",
    "tell me about this document",
    "tell me about this",
    "explain this document",
    "explain this",
    "summarize",
    "topics",
    "content",
)

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def normalize_query(text: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    text = _PUNCT_RE.sub(" ", text.lower())
    return _SPACE_RE.sub(" ", text).strip()


class QueryClassifier:
    """Phrase-based intent classifier."""

    def __init__(self, generic_phrases: Optional[Iterable[str]] = None):
        phrases = generic_phrases if generic_phrases is not None else DEFAULT_GENERIC_PHRASES
        self._phrases = tuple(p for p in (normalize_query(p) for p in phrases) if p)

    def classify(self, query: str) -> QueryType:
        """Classify query intent.

        Args:
            query: Raw user query.

        Returns:
            GENERIC if any generic phrase occurs in the normalized query.
        """
        text = normalize_query(query)
        for phrase in self._phrases:
            if phrase in text:
                logger.debug(f"Generic phrase '{phrase}' in '{text[:50]}'")
                return QueryType.GENERIC
        return QueryType.SPECIFIC

    def is_generic(self, query: str) -> bool:
        return self.classify(query) is QueryType.GENERIC

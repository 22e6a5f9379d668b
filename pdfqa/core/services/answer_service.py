"""Answer service - coordinates search and LLM."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..models.search import SearchResult, SelectedChunk
from ..protocols.llm import LLMProtocol
from ..strategies.selection import truncate_to_budget
from .search_service import SearchService

logger = logging.getLogger(__name__)

CHUNK_SEPARATOR = "\n\n---\n\n"

PROMPT_WITH_CONTEXT = """You are a helpful assistant analyzing PDF documents. Answer the user's question based on the provided context.

DOCUMENT INFORMATION:
- Primary document: "{primary_source}"
- Retrieval: {context_message}
- Search quality: {search_quality}

Context from the documents:
{context}

User's Question: {question}

Instructions:
- Answer based ONLY on the provided context
- Be specific and cite relevant details from the text, naming the document they come from
- If the context doesn't fully answer the question, acknowledge what's missing
- Do not speculate about information not present in the context
- If the search quality seems low, mention that the user might want to rephrase their question

Answer:"""


@dataclass
class AnswerResult:
    """Generated answer with the retrieval it was based on."""
    answer: str
    primary_source: Optional[str]
    search: SearchResult
    sources_used: list[str] = field(default_factory=list)
    context_length: int = 0


def build_context(chunks: list[SelectedChunk]) -> str:
    """Format chunks as context for LLM."""
    return CHUNK_SEPARATOR.join(f"[From: {c.source}]\n{c.text}" for c in chunks)


class AnswerService:
    """Answer questions from retrieved document context."""

    def __init__(
        self,
        llm: LLMProtocol,
        search_service: SearchService,
        max_context_chars: int = 12000,
    ):
        """Initialize answer service.

        Args:
            llm: LLM client.
            search_service: Search service.
            max_context_chars: Character budget for the rendered context.
        """
        self._llm = llm
        self._search = search_service
        self._max_context_chars = max_context_chars

    async def answer(self, question: str) -> AnswerResult:
        """Search the corpus and generate an answer.

        Args:
            question: User question.

        Returns:
            Answer result.
        """
        result = self._search.search(question)

        if not result.matched_chunks:
            return AnswerResult(
                answer=self._no_context_answer(result),
                primary_source=result.primary_source,
                search=result,
            )

        chunks = self._fit_budget(result.matched_chunks)
        context = build_context(chunks)

        prompt = PROMPT_WITH_CONTEXT.format(
            primary_source=result.primary_source,
            context_message=result.context_message,
            search_quality=f"{result.query_info.best_score * 100:.1f}%",
            context=context,
            question=question,
        )

        logger.info(
            f"Generating answer from {len(chunks)} chunks "
            f"({len(context)} chars) for '{question[:50]}...'"
        )
        answer = await self._llm.generate(prompt)

        sources = []
        for c in chunks:
            if c.source not in sources:
                sources.append(c.source)

        return AnswerResult(
            answer=answer,
            primary_source=result.primary_source,
            search=result,
            sources_used=sources,
            context_length=len(context),
        )

    def _fit_budget(self, chunks: list[SelectedChunk]) -> list[SelectedChunk]:
        """Keep the rendered context, separators and headers included, in budget."""
        overhead = len(CHUNK_SEPARATOR) + max(len(f"[From: {c.source}]\n") for c in chunks)
        budget = self._max_context_chars - overhead * len(chunks)
        kept = truncate_to_budget(chunks, max(budget, 0))
        # Never send an empty context when at least one chunk exists
        return kept or chunks[:1]

    @staticmethod
    def _no_context_answer(result: SearchResult) -> str:
        if result.primary_source is None:
            return "No documents have been uploaded yet. Upload a PDF to ask questions about it."
        if result.suggestion:
            return f"{result.context_message} {result.suggestion}"
        return (
            "I couldn't find any relevant information in your most recent document "
            f"({result.primary_source}) to answer your question. You might want to try "
            "rephrasing your question or asking about different topics covered in this document."
        )

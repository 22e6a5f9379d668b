"""Search service - retrieval strategy orchestration."""

import logging
import time
from typing import Callable, Optional

import numpy as np

from ..errors import EmbeddingError, EmptyQueryError, IndexUnavailableError
from ..models.document import Match, RankedSource
from ..models.search import (
    QueryInfo,
    QueryType,
    SearchOutcome,
    SearchResult,
    SearchState,
    SearchStrategy,
    SelectedChunk,
    SourceBreakdown,
)
from ..protocols.embedder import EmbedderProtocol
from ..strategies.ranking import RankingEngine, group_by_source
from ..strategies.scoring import (
    EmptyTextStrategy,
    MinRelevanceStrategy,
    ScoringStrategy,
)
from ..strategies.selection import ChunkSelector
from .corpus_index import CorpusIndex
from .query_classifier import QueryClassifier
from .recency_resolver import RecencyResolver

logger = logging.getLogger(__name__)

TOPIC_NOT_FOUND_SUGGESTION = (
    "This topic doesn't appear to be covered in any of your uploaded documents."
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SearchService:
    """Decide which chunks, from which documents, answer a query."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        corpus_index: CorpusIndex,
        recency_resolver: RecencyResolver,
        classifier: Optional[QueryClassifier] = None,
        ranking: Optional[RankingEngine] = None,
        selector: Optional[ChunkSelector] = None,
        primary_document_threshold: float = 0.2,
        context_search_threshold: float = 0.25,
        min_relevance_score: float = 0.15,
        strategies: list[ScoringStrategy] | None = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """Initialize search service.

        Args:
            embedder: Embedding service.
            corpus_index: Vector index accessor.
            recency_resolver: Most-recent document lookup.
            classifier: Generic/specific query classifier.
            ranking: Multi-document ranking engine.
            selector: Final chunk selector.
            primary_document_threshold: Best score at which the most recent
                document is accepted on its own.
            context_search_threshold: Best score below which the search
                escalates to the whole corpus.
            min_relevance_score: Noise floor for specific-query matches.
            strategies: Custom match filters for specific queries.
            clock: Current time in epoch milliseconds.
        """
        self._embedder = embedder
        self._index = corpus_index
        self._recency = recency_resolver
        self._classifier = classifier or QueryClassifier()
        self._ranking = ranking or RankingEngine()
        self._selector = selector or ChunkSelector()
        self._primary_threshold = primary_document_threshold
        self._context_threshold = context_search_threshold
        self._clock = clock

        self._strategies = strategies or [
            EmptyTextStrategy(),
            MinRelevanceStrategy(min_relevance_score),
        ]

    def search(self, query: str) -> SearchResult:
        """Retrieve context for a query.

        Args:
            query: User question.

        Returns:
            Search result with selected chunks and strategy metadata.

        Raises:
            EmptyQueryError: Query is blank.
            EmbeddingError: Query could not be embedded.
        """
        if not query or not query.strip():
            raise EmptyQueryError("Query is required")

        info = QueryInfo(original=query, query_type=QueryType.SPECIFIC)
        self._enter(info, SearchState.START)

        info.query_type = self._classifier.classify(query)
        self._enter(info, SearchState.CLASSIFIED)

        try:
            recent = self._recency.find_most_recent_document()
        except IndexUnavailableError as e:
            logger.error(f"Index unavailable while resolving recent document: {e}")
            info.index_unavailable = True
            recent = None
        self._enter(info, SearchState.RECENCY_RESOLVED)

        if recent is None:
            return self._finish(
                info,
                outcome=SearchOutcome.NO_DOCUMENTS,
                strategy=None,
                message="No documents found",
                recent=None,
            )

        embedding = self._embed(query)

        if info.query_type is QueryType.GENERIC:
            return self._generic_search(info, embedding, recent)
        return self._specific_search(info, embedding, recent)

    def _generic_search(
        self, info: QueryInfo, embedding: list[float], recent: str
    ) -> SearchResult:
        self._enter(info, SearchState.GENERIC_SEARCH)
        logger.info(f"Generic query: searching only '{recent}'")

        matches = self._query_filtered(info, embedding, recent)
        info.best_score = max((m.score for m in matches), default=0.0)

        ranked = self._ranking.rank(group_by_source(matches), self._clock())
        chunks = self._select(info, ranked)

        if not chunks:
            return self._finish(
                info,
                outcome=SearchOutcome.NO_RELEVANT_MATCHES,
                strategy=SearchStrategy.RECENT_DOCUMENT_ONLY,
                message=f"Nothing relevant was found in the most recent document: {recent}",
                recent=recent,
                primary_source=recent,
                total_matches=len(matches),
            )

        return self._finish(
            info,
            outcome=SearchOutcome.FOUND,
            strategy=SearchStrategy.RECENT_DOCUMENT_ONLY,
            message=f"Answering based on the most recently uploaded document: {recent}",
            recent=recent,
            primary_source=recent,
            chunks=chunks,
            total_matches=len(matches),
        )

    def _specific_search(
        self, info: QueryInfo, embedding: list[float], recent: str
    ) -> SearchResult:
        self._enter(info, SearchState.SPECIFIC_SEARCH)

        recent_matches = self._query_filtered(info, embedding, recent)
        best_recent = max((m.score for m in recent_matches), default=0.0)
        info.best_score = best_recent
        logger.info(f"Best score in '{recent}': {best_recent:.3f}")

        alternatives: list[str] = []

        if best_recent >= self._primary_threshold:
            strategy = SearchStrategy.RECENT_DOCUMENT_SUFFICIENT
            message = f"Found relevant information in the most recent document: {recent}"
            matches = recent_matches

        elif best_recent < self._context_threshold:
            self._enter(info, SearchState.ESCALATED_SEARCH)
            logger.info(
                f"Low relevance in '{recent}' ({best_recent:.3f}), searching all documents"
            )

            global_matches = self._query_global(info, embedding)
            best_global = max((m.score for m in global_matches), default=0.0)
            info.best_score = max(best_recent, best_global)
            logger.info(f"Best global score: {best_global:.3f}")

            if not best_global > self._primary_threshold:
                logger.info(f"Topic not found in any document for '{info.original[:50]}...'")
                return self._finish(
                    info,
                    outcome=SearchOutcome.NO_RELEVANT_MATCHES,
                    strategy=SearchStrategy.TOPIC_NOT_FOUND,
                    message=(
                        f'This topic was not found in "{recent}" '
                        "or any other uploaded documents."
                    ),
                    recent=recent,
                    primary_source=recent,
                    total_matches=len(global_matches),
                    suggestion=TOPIC_NOT_FOUND_SUGGESTION,
                )

            alternatives = self._alternative_sources(global_matches, recent)
            info.suggest_not_in_recent = True
            info.alternative_sources = alternatives
            logger.info(f"Found matches in other documents: {alternatives}")

            strategy = SearchStrategy.CROSS_DOCUMENT_SEARCH
            message = (
                f'This topic was not found in the recent document "{recent}", '
                f"but was found in: {', '.join(alternatives)}"
            )
            # Only the documents named in the message compete for context
            matches = [m for m in global_matches if m.source in alternatives]

        else:
            strategy = SearchStrategy.RECENT_DOCUMENT_MODERATE
            message = f"Partial information found in recent document: {recent}"
            matches = recent_matches

        filtered = matches
        for scoring in self._strategies:
            filtered = scoring.apply(info.original, filtered)

        ranked = self._ranking.rank(group_by_source(filtered), self._clock())
        chunks = self._select(info, ranked)

        if strategy is SearchStrategy.CROSS_DOCUMENT_SEARCH and ranked:
            primary_source = ranked[0].source
        else:
            primary_source = recent

        if not chunks:
            return self._finish(
                info,
                outcome=SearchOutcome.NO_RELEVANT_MATCHES,
                strategy=strategy,
                message=f"{message}. No passages cleared the relevance filters.",
                recent=recent,
                primary_source=primary_source,
                total_matches=len(matches),
                alternatives=alternatives,
            )

        return self._finish(
            info,
            outcome=SearchOutcome.FOUND,
            strategy=strategy,
            message=message,
            recent=recent,
            primary_source=primary_source,
            chunks=chunks,
            total_matches=len(matches),
            alternatives=alternatives,
        )

    def _embed(self, query: str) -> list[float]:
        try:
            vector = self._embedder.encode(query)
        except Exception as e:
            logger.error(f"Query embedding failed: {e}")
            raise EmbeddingError(f"Failed to embed query: {e}") from e
        return np.asarray(vector, dtype=float).reshape(-1).tolist()

    def _query_filtered(
        self, info: QueryInfo, embedding: list[float], source: str
    ) -> list[Match]:
        try:
            return self._index.query_filtered(embedding, source)
        except IndexUnavailableError as e:
            logger.error(f"Index unavailable for '{source}' search: {e}")
            info.index_unavailable = True
            return []

    def _query_global(self, info: QueryInfo, embedding: list[float]) -> list[Match]:
        try:
            return self._index.query_global(embedding)
        except IndexUnavailableError as e:
            logger.error(f"Index unavailable for corpus-wide search: {e}")
            info.index_unavailable = True
            return []

    def _select(self, info: QueryInfo, ranked: list[RankedSource]) -> list[SelectedChunk]:
        chunks = self._selector.select(ranked, info.query_type)
        self._enter(info, SearchState.SELECTED)
        return chunks

    def _alternative_sources(self, matches: list[Match], recent: str) -> list[str]:
        """Other documents with a match above the primary threshold."""
        seen = set()
        sources = []
        for m in matches:
            if m.source == recent or not m.score > self._primary_threshold:
                continue
            if m.source not in seen:
                seen.add(m.source)
                sources.append(m.source)
        return sources

    def _finish(
        self,
        info: QueryInfo,
        outcome: SearchOutcome,
        strategy: Optional[SearchStrategy],
        message: str,
        recent: Optional[str],
        primary_source: Optional[str] = None,
        chunks: Optional[list[SelectedChunk]] = None,
        total_matches: int = 0,
        alternatives: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> SearchResult:
        chunks = chunks or []
        info.chunks_used = len(chunks)
        info.total_characters = sum(c.char_count for c in chunks)
        self._enter(info, SearchState.DONE)

        logger.info(
            f"Search done: strategy={strategy.value if strategy else None} "
            f"outcome={outcome.value} chunks={len(chunks)} "
            f"primary={primary_source} for '{info.original[:50]}...'"
        )

        return SearchResult(
            matched_chunks=chunks,
            primary_source=primary_source,
            search_strategy=strategy,
            context_message=message,
            source_breakdown=self._source_breakdown(chunks),
            outcome=outcome,
            query_info=info,
            most_recent_source=recent,
            alternative_sources=list(alternatives or []),
            total_matches=total_matches,
            suggestion=suggestion,
        )

    def _source_breakdown(self, chunks: list[SelectedChunk]) -> list[SourceBreakdown]:
        """Chunk counts and score summary per source, in selection order."""
        grouped: dict[str, list[float]] = {}
        for c in chunks:
            grouped.setdefault(c.source, []).append(c.score)
        return [
            SourceBreakdown(
                source=source,
                chunks=len(scores),
                max_score=max(scores),
                avg_score=sum(scores) / len(scores),
            )
            for source, scores in grouped.items()
        ]

    @staticmethod
    def _enter(info: QueryInfo, state: SearchState) -> None:
        info.states.append(state.value)
        logger.debug(f"[search] state -> {state.value}")

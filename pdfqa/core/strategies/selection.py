"""Chunk selection under relevance thresholds and per-document quotas."""

import logging
from dataclasses import dataclass

from ..models.document import Match, RankedSource
from ..models.search import QueryType, SelectedChunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionLimits:
    """Quotas and threshold factors for chunk selection."""
    generic_max_chunks: int = 10
    primary_max_chunks: int = 8
    secondary_max_chunks: int = 2
    max_total_chunks: int = 10
    max_total_chars: int = 12000
    min_chunks_before_secondary: int = 4
    primary_ratio: float = 0.7
    primary_cap: float = 0.05
    secondary_ratio: float = 0.8
    secondary_cap: float = 0.08


def truncate_to_budget(
    chunks: list[SelectedChunk], max_chars: int
) -> list[SelectedChunk]:
    """Drop lowest-priority chunks until the total text fits ``max_chars``.

    Chunks are expected in priority order, as returned by ``ChunkSelector``.
    """
    kept = list(chunks)
    total = sum(c.char_count for c in kept)
    while kept and total > max_chars:
        dropped = kept.pop()
        total -= dropped.char_count

    if len(kept) < len(chunks):
        logger.info(
            f"Context budget: {len(chunks)} → {len(kept)} chunks "
            f"({total}/{max_chars} chars)"
        )

    return kept


class ChunkSelector:
    """Pick a bounded, ordered context set from ranked sources."""

    def __init__(self, limits: SelectionLimits | None = None):
        self._limits = limits or SelectionLimits()

    @property
    def limits(self) -> SelectionLimits:
        return self._limits

    def select(
        self, ranked_sources: list[RankedSource], query_type: QueryType
    ) -> list[SelectedChunk]:
        """Select chunks for the generation context.

        Args:
            ranked_sources: Output of ``RankingEngine.rank``.
            query_type: Generic takes the top source only; specific may add
                a secondary source when the primary is thin.

        Returns:
            Primary chunks first, then secondary, each by score descending.
        """
        if not ranked_sources:
            return []

        limits = self._limits
        primary = ranked_sources[0]

        if query_type is QueryType.GENERIC:
            selected = self._take(
                primary, threshold=None, cap=limits.generic_max_chunks, is_primary=True
            )
            return selected[: limits.max_total_chunks]

        primary_threshold = min(primary.max_score * limits.primary_ratio, limits.primary_cap)
        selected = self._take(
            primary,
            threshold=primary_threshold,
            cap=limits.primary_max_chunks,
            is_primary=True,
        )

        if len(selected) < limits.min_chunks_before_secondary and len(ranked_sources) > 1:
            secondary = ranked_sources[1]
            secondary_threshold = min(
                secondary.max_score * limits.secondary_ratio, limits.secondary_cap
            )
            extra = self._take(
                secondary,
                threshold=secondary_threshold,
                cap=limits.secondary_max_chunks,
                is_primary=False,
            )
            if extra:
                logger.info(
                    f"Added {len(extra)} secondary chunks from '{secondary.source}' "
                    f"(threshold={secondary_threshold:.3f})"
                )
            selected.extend(extra)

        return selected[: limits.max_total_chunks]

    def _take(
        self,
        ranked: RankedSource,
        threshold: float | None,
        cap: int,
        is_primary: bool,
    ) -> list[SelectedChunk]:
        candidates = sorted(ranked.matches, key=lambda m: m.score, reverse=True)
        chosen: list[SelectedChunk] = []
        for match in candidates:
            if len(chosen) >= cap:
                break
            if not match.text or not match.text.strip():
                continue
            if threshold is not None and not match.score > threshold:
                continue
            chosen.append(self._to_selected(match, is_primary))
        return chosen

    @staticmethod
    def _to_selected(match: Match, is_primary: bool) -> SelectedChunk:
        return SelectedChunk(
            text=match.text,
            score=match.score,
            source=match.source,
            chunk_index=match.chunk_index,
            is_primary=is_primary,
            id=match.id,
        )

"""Scoring, ranking and selection strategies."""
from .scoring import EmptyTextStrategy, MinRelevanceStrategy, ScoringStrategy
from .ranking import RankingEngine, group_by_source, recency_boost
from .selection import ChunkSelector, SelectionLimits, truncate_to_budget

__all__ = [
    "EmptyTextStrategy",
    "MinRelevanceStrategy",
    "ScoringStrategy",
    "RankingEngine",
    "group_by_source",
    "recency_boost",
    "ChunkSelector",
    "SelectionLimits",
    "truncate_to_budget",
]

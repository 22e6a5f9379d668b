"""Domain models."""
from .document import Chunk, DocumentInfo, IngestReport, Match, RankedSource
from .search import (
    QueryInfo,
    QueryType,
    SearchOutcome,
    SearchResult,
    SearchState,
    SearchStrategy,
    SelectedChunk,
    SourceBreakdown,
)

__all__ = [
    "Chunk",
    "DocumentInfo",
    "IngestReport",
    "Match",
    "RankedSource",
    "QueryInfo",
    "QueryType",
    "SearchOutcome",
    "SearchResult",
    "SearchState",
    "SearchStrategy",
    "SelectedChunk",
    "SourceBreakdown",
]

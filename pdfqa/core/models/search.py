"""Search result models."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class QueryType(Enum):
    """Query intent."""
    GENERIC = "generic"    # overview / summary of a document
    SPECIFIC = "specific"  # a fact inside a document


class SearchStrategy(Enum):
    """Strategy tag reported to the caller."""
    RECENT_DOCUMENT_ONLY = "recent_document_only"
    RECENT_DOCUMENT_SUFFICIENT = "recent_document_sufficient"
    RECENT_DOCUMENT_MODERATE = "recent_document_moderate"
    CROSS_DOCUMENT_SEARCH = "cross_document_search"
    TOPIC_NOT_FOUND = "topic_not_found"


class SearchOutcome(Enum):
    """Business outcome of a search."""
    FOUND = "found"
    NO_DOCUMENTS = "no_documents"
    NO_RELEVANT_MATCHES = "no_relevant_matches"


class SearchState(Enum):
    """Orchestrator states for one query."""
    START = "start"
    CLASSIFIED = "classified"
    RECENCY_RESOLVED = "recency_resolved"
    GENERIC_SEARCH = "generic_search"
    SPECIFIC_SEARCH = "specific_search"
    ESCALATED_SEARCH = "escalated_search"
    SELECTED = "selected"
    DONE = "done"


@dataclass
class SelectedChunk:
    """Chunk chosen as context for generation."""
    text: str
    score: float
    source: str
    chunk_index: Optional[int]
    is_primary: bool
    id: str = ""

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass
class SourceBreakdown:
    """Per-source summary of the selected context."""
    source: str
    chunks: int
    max_score: float
    avg_score: float


@dataclass
class QueryInfo:
    """Diagnostics about how a query was handled."""
    original: str
    query_type: QueryType
    chunks_used: int = 0
    total_characters: int = 0
    best_score: float = 0.0
    suggest_not_in_recent: bool = False
    alternative_sources: list[str] = field(default_factory=list)
    index_unavailable: bool = False
    states: list[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """Output of the retrieval engine."""
    matched_chunks: list[SelectedChunk]
    primary_source: Optional[str]
    search_strategy: Optional[SearchStrategy]
    context_message: str
    source_breakdown: list[SourceBreakdown]
    outcome: SearchOutcome
    query_info: QueryInfo
    most_recent_source: Optional[str] = None
    alternative_sources: list[str] = field(default_factory=list)
    total_matches: int = 0
    suggestion: Optional[str] = None

    @property
    def sources(self) -> list[str]:
        """Unique sources of the selected chunks, in order."""
        return [b.source for b in self.source_breakdown]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        data = asdict(self)
        data["search_strategy"] = (
            self.search_strategy.value if self.search_strategy else None
        )
        data["outcome"] = self.outcome.value
        data["query_info"]["query_type"] = self.query_info.query_type.value
        for chunk, raw in zip(self.matched_chunks, data["matched_chunks"]):
            raw["char_count"] = chunk.char_count
        return data

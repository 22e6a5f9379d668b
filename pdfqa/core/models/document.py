"""Document domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Chunk:
    """Document chunk for indexing."""
    content: str
    source: str
    file_hash: str
    chunk_index: int
    timestamp: int
    total_chunks: int
    estimated_page: int = 1


@dataclass
class Match:
    """Single retrieval hit from the vector index."""
    id: str
    text: str
    source: str
    score: float = 0.0
    timestamp: int = 0
    chunk_index: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_metadata(
        cls,
        id: str,
        score: Optional[float],
        metadata: Optional[dict[str, Any]],
        text: Optional[str] = None,
    ) -> "Match":
        """Build a match from a raw index row.

        Args:
            id: Vector id.
            score: Similarity score, may be missing.
            metadata: Stored metadata, may be missing.
            text: Document text if the store keeps it outside metadata.

        Returns:
            Match with defaults applied for absent fields.
        """
        metadata = metadata or {}
        if text is None:
            text = metadata.get("text") or ""
        chunk_index = metadata.get("chunk_index")
        return cls(
            id=str(id),
            text=text,
            source=str(metadata.get("source") or metadata.get("filename") or "unknown"),
            score=float(score) if score is not None else 0.0,
            timestamp=int(metadata.get("timestamp") or 0),
            chunk_index=int(chunk_index) if chunk_index is not None else None,
            metadata=metadata,
        )


@dataclass
class DocumentInfo:
    """Ingested document as seen through the index."""
    source: str
    timestamp: int
    chunk_count: int = 0


@dataclass
class RankedSource:
    """Per-document ranking entry for one query."""
    source: str
    matches: list[Match]
    max_score: float
    avg_score: float
    timestamp: int
    match_count: int
    recency_boost: float
    final_score: float


@dataclass
class IngestReport:
    """Summary of one ingested file."""
    filename: str
    document_id: str
    chunks: int
    timestamp: int
    upload_date: str
    chunk_previews: list[str] = field(default_factory=list)

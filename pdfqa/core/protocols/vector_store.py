"""Vector store protocol for dependency injection."""
from typing import Any, Optional, Protocol, runtime_checkable

from ..models.document import Match


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage."""

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict]
    ) -> None:
        """Insert or replace chunks in the store.

        Args:
            ids: Chunk IDs.
            embeddings: Chunk embeddings.
            documents: Chunk texts.
            metadatas: Chunk metadata.
        """
        ...

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[Match]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            n_results: Number of results to return.
            where: Metadata filter, e.g. ``{"source": {"$eq": "a.pdf"}}``.

        Returns:
            Matches ordered by descending similarity.
        """
        ...

    def count(self) -> int:
        """Get chunk count."""
        ...

    def get_all_metadatas(self) -> list[dict]:
        """Get all chunk metadatas."""
        ...

"""Corpus index accessor - thin layer over the vector store."""

import logging
from typing import Optional

from ..errors import IndexUnavailableError
from ..models.document import Match
from ..protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)


class CorpusIndex:
    """Similarity queries and listings against the chunk index."""

    def __init__(
        self,
        vector_store: VectorStoreProtocol,
        top_k: int = 20,
        global_top_k: int = 30,
    ):
        """Initialize accessor.

        Args:
            vector_store: Vector store collaborator.
            top_k: Default result count for document-filtered queries.
            global_top_k: Default result count for corpus-wide queries.
        """
        self._vector_store = vector_store
        self._top_k = top_k
        self._global_top_k = global_top_k

    def query_global(
        self, embedding: list[float], top_k: Optional[int] = None
    ) -> list[Match]:
        """Search the whole corpus."""
        return self._query(embedding, top_k or self._global_top_k, where=None)

    def query_filtered(
        self, embedding: list[float], source: str, top_k: Optional[int] = None
    ) -> list[Match]:
        """Search only chunks of one document.

        Chunks without a ``source`` field are grouped under their
        ``filename``, so both fields are matched.
        """
        where = {"$or": [{"source": {"$eq": source}}, {"filename": {"$eq": source}}]}
        return self._query(embedding, top_k or self._top_k, where=where)

    def scan_metadatas(self) -> list[dict]:
        """List metadata of every stored chunk."""
        try:
            return self._vector_store.get_all_metadatas()
        except Exception as e:
            logger.error(f"Index listing failed: {e}")
            raise IndexUnavailableError(f"Vector index listing failed: {e}") from e

    def _query(
        self, embedding: list[float], top_k: int, where: Optional[dict]
    ) -> list[Match]:
        try:
            return self._vector_store.query(
                query_embedding=embedding, n_results=top_k, where=where
            )
        except Exception as e:
            logger.error(f"Index query failed (filter={where}): {e}")
            raise IndexUnavailableError(f"Vector index query failed: {e}") from e

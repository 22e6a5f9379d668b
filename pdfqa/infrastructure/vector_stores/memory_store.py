import logging
from threading import RLock
from typing import Any, Optional

import numpy as np

from pdfqa.core.models.document import Match

logger = logging.getLogger(__name__)


def _matches_where(metadata: dict, where: Optional[dict[str, Any]]) -> bool:
    """Evaluate the equality and $or/$and subset of Chroma-style filters."""
    if not where:
        return True
    for key, condition in where.items():
        if key == "$or":
            if not any(_matches_where(metadata, clause) for clause in condition):
                return False
        elif key == "$and":
            if not all(_matches_where(metadata, clause) for clause in condition):
                return False
        elif isinstance(condition, dict):
            if "$eq" in condition and metadata.get(key) != condition["$eq"]:
                return False
            if "$ne" in condition and metadata.get(key) == condition["$ne"]:
                return False
        elif metadata.get(key) != condition:
            return False
    return True


class InMemoryVectorStore:
    """Process-local vector store with exact cosine search."""

    def __init__(self):
        self._ids: list[str] = []
        self._positions: dict[str, int] = {}
        self._vectors: list[np.ndarray] = []
        self._documents: list[str] = []
        self._metadatas: list[dict] = []
        self._lock = RLock()

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Insert or replace chunks."""
        with self._lock:
            for id_, embedding, document, metadata in zip(ids, embeddings, documents, metadatas):
                vector = np.asarray(embedding, dtype=float)
                norm = np.linalg.norm(vector)
                if norm > 0:
                    vector = vector / norm

                pos = self._positions.get(id_)
                if pos is not None:
                    self._vectors[pos] = vector
                    self._documents[pos] = document
                    self._metadatas[pos] = dict(metadata)
                else:
                    self._positions[id_] = len(self._ids)
                    self._ids.append(id_)
                    self._vectors.append(vector)
                    self._documents.append(document)
                    self._metadatas.append(dict(metadata))

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[Match]:
        """Search by embedding."""
        with self._lock:
            candidates = [
                i for i, meta in enumerate(self._metadatas) if _matches_where(meta, where)
            ]
            if not candidates:
                return []

            query = np.asarray(query_embedding, dtype=float)
            norm = np.linalg.norm(query)
            if norm > 0:
                query = query / norm

            matrix = np.vstack([self._vectors[i] for i in candidates])
            scores = matrix @ query
            order = np.argsort(-scores, kind="stable")[:n_results]

            return [
                Match.from_metadata(
                    id=self._ids[candidates[j]],
                    score=float(scores[j]),
                    metadata=dict(self._metadatas[candidates[j]]),
                    text=self._documents[candidates[j]],
                )
                for j in order
            ]

    def count(self) -> int:
        """Get chunk count."""
        with self._lock:
            return len(self._ids)

    def get_all_metadatas(self) -> list[dict]:
        """Get all chunk metadatas."""
        with self._lock:
            return [dict(m) for m in self._metadatas]

import math

import numpy as np
import pytest

from pdfqa.core.models.document import Match
from pdfqa.core.services.corpus_index import CorpusIndex
from pdfqa.core.services.recency_resolver import RecencyResolver
from pdfqa.core.services.search_service import SearchService
from pdfqa.infrastructure.vector_stores.memory_store import InMemoryVectorStore, _matches_where

NOW_MS = 1_700_000_000_000
MINUTE_MS = 60_000


class FakeEmbedder:
    """Every query maps to the unit x-axis; chunk vectors encode their score."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list = []

    def encode(self, texts):
        self.calls.append(texts)
        if self.fail:
            raise RuntimeError("model failed to load")
        if isinstance(texts, str):
            return np.array([1.0, 0.0])
        return np.array([[1.0, 0.0] for _ in texts])

    def warmup(self) -> None:
        pass


class FailingVectorStore:
    def upsert(self, ids, embeddings, documents, metadatas):
        raise ConnectionError("index down")

    def query(self, query_embedding, n_results=5, where=None):
        raise ConnectionError("index down")

    def count(self):
        raise ConnectionError("index down")

    def get_all_metadatas(self):
        raise ConnectionError("index down")


def vector_for(score: float) -> list[float]:
    """Unit vector whose dot product with the x-axis equals ``score``."""
    return [score, math.sqrt(1.0 - score * score)]


def seed_document(
    store: InMemoryVectorStore,
    source: str,
    scores: list[float],
    timestamp: int,
    texts: list[str] | None = None,
) -> None:
    texts = texts or [f"{source} passage {i}" for i in range(len(scores))]
    store.upsert(
        ids=[f"{source}-chunk-{i}-{timestamp}" for i in range(len(scores))],
        embeddings=[vector_for(s) for s in scores],
        documents=texts,
        metadatas=[
            {
                "text": text,
                "source": source,
                "filename": source,
                "timestamp": timestamp,
                "chunk_index": i,
            }
            for i, text in enumerate(texts)
        ],
    )


def make_match(
    source: str,
    score: float,
    timestamp: int = NOW_MS,
    chunk_index: int = 0,
    text: str | None = None,
) -> Match:
    return Match(
        id=f"{source}-{chunk_index}",
        text=f"{source} text {chunk_index}" if text is None else text,
        source=source,
        score=score,
        timestamp=timestamp,
        chunk_index=chunk_index,
    )


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def make_service(embedder):
    def _make(vector_store, **kwargs) -> SearchService:
        corpus_index = CorpusIndex(vector_store)
        return SearchService(
            embedder=kwargs.pop("embedder", embedder),
            corpus_index=corpus_index,
            recency_resolver=RecencyResolver(corpus_index),
            clock=lambda: NOW_MS,
            **kwargs,
        )

    return _make


class ExactScoreStore:
    """Returns stored matches with their scores untouched by normalization."""

    def __init__(self):
        self.matches: list[Match] = []

    def add(self, source: str, scores: list[float], timestamp: int) -> None:
        for score in scores:
            i = len(self.matches)
            self.matches.append(
                Match(
                    id=f"{source}-{i}",
                    text=f"{source} passage {i}",
                    source=source,
                    score=score,
                    timestamp=timestamp,
                    chunk_index=i,
                    metadata={"source": source, "timestamp": timestamp},
                )
            )

    def query(self, query_embedding, n_results=5, where=None):
        hits = [m for m in self.matches if _matches_where(m.metadata, where)]
        hits.sort(key=lambda m: m.score, reverse=True)
        return hits[:n_results]

    def get_all_metadatas(self):
        return [dict(m.metadata) for m in self.matches]

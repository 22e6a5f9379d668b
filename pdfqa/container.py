import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


def configure_container(settings: Settings) -> Container:
    """Build a container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.llm import LLMProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.answer_service import AnswerService
    from .core.services.corpus_index import CorpusIndex
    from .core.services.ingest_service import IngestService
    from .core.services.query_classifier import QueryClassifier
    from .core.services.recency_resolver import RecencyResolver
    from .core.services.search_service import SearchService
    from .core.strategies.ranking import RankingEngine
    from .core.strategies.selection import ChunkSelector, SelectionLimits

    container = Container()

    container.register(
        EmbedderProtocol,
        lambda: _build_embedder(settings),
        singleton=True,
    )

    container.register(
        VectorStoreProtocol,
        lambda: _build_vector_store(settings),
        singleton=True,
    )

    container.register(
        LLMProtocol,
        lambda: _build_llm(settings),
        singleton=True,
    )

    container.register(
        CorpusIndex,
        lambda: CorpusIndex(
            vector_store=container.resolve(VectorStoreProtocol),
            top_k=settings.rag_top_k,
            global_top_k=settings.rag_global_top_k,
        ),
        singleton=True,
    )

    container.register(
        RecencyResolver,
        lambda: RecencyResolver(container.resolve(CorpusIndex)),
        singleton=True,
    )

    container.register(
        SearchService,
        lambda: SearchService(
            embedder=container.resolve(EmbedderProtocol),
            corpus_index=container.resolve(CorpusIndex),
            recency_resolver=container.resolve(RecencyResolver),
            classifier=QueryClassifier(settings.generic_phrases or None),
            ranking=RankingEngine(tie_margin=settings.rag_tie_margin),
            selector=ChunkSelector(
                SelectionLimits(
                    generic_max_chunks=settings.rag_generic_max_chunks,
                    primary_max_chunks=settings.rag_primary_max_chunks,
                    secondary_max_chunks=settings.rag_secondary_max_chunks,
                    max_total_chunks=settings.rag_max_total_chunks,
                    max_total_chars=settings.rag_max_context_chars,
                )
            ),
            primary_document_threshold=settings.rag_primary_document_threshold,
            context_search_threshold=settings.rag_context_search_threshold,
            min_relevance_score=settings.rag_min_relevance_score,
        ),
        singleton=True,
    )

    container.register(
        AnswerService,
        lambda: AnswerService(
            llm=container.resolve(LLMProtocol),
            search_service=container.resolve(SearchService),
            max_context_chars=settings.rag_max_context_chars,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            docs_path=settings.docs_path,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container


def _build_embedder(settings: Settings):
    from .infrastructure.embeddings.sentence_transformer import (
        SentenceTransformerEmbedder,
    )

    return SentenceTransformerEmbedder(settings.embedding_model)


def _build_vector_store(settings: Settings):
    if settings.vector_backend == "memory":
        from .infrastructure.vector_stores.memory_store import InMemoryVectorStore

        return InMemoryVectorStore()

    if settings.vector_backend != "chroma":
        raise ValueError(f"Unknown vector backend: {settings.vector_backend}")

    from .infrastructure.vector_stores.chroma_store import ChromaVectorStore

    return ChromaVectorStore(
        host=settings.chroma_host,
        port=settings.chroma_port,
        collection_name=settings.chroma_collection,
        timeout=settings.chroma_timeout,
    )


def _build_llm(settings: Settings):
    from .infrastructure.llm.ollama_client import OllamaClient

    return OllamaClient(
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
        api_key=settings.llm_api_key,
    )

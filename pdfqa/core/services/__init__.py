"""Core business services."""
from .query_classifier import QueryClassifier
from .corpus_index import CorpusIndex
from .recency_resolver import RecencyResolver
from .search_service import SearchService
from .ingest_service import IngestService
from .answer_service import AnswerService

__all__ = [
    "QueryClassifier",
    "CorpusIndex",
    "RecencyResolver",
    "SearchService",
    "IngestService",
    "AnswerService",
]

"""Recency resolver - finds the most recently ingested document."""

import logging
from typing import Optional

from ..models.document import DocumentInfo
from .corpus_index import CorpusIndex

logger = logging.getLogger(__name__)


class RecencyResolver:
    """Resolve document freshness from stored chunk timestamps."""

    def __init__(self, corpus_index: CorpusIndex):
        self._index = corpus_index

    def list_documents(self) -> list[DocumentInfo]:
        """Group stored chunks into documents.

        Returns:
            Documents in first-seen order with their newest timestamp.
        """
        documents: dict[str, DocumentInfo] = {}

        for meta in self._index.scan_metadatas():
            meta = meta or {}
            source = str(meta.get("source") or meta.get("filename") or "unknown")
            timestamp = int(meta.get("timestamp") or 0)

            info = documents.get(source)
            if info is None:
                documents[source] = DocumentInfo(source=source, timestamp=timestamp, chunk_count=1)
                continue

            info.chunk_count += 1
            if timestamp > info.timestamp:
                info.timestamp = timestamp

        return list(documents.values())

    def find_most_recent_document(self) -> Optional[str]:
        """Return the source with the newest upload, or None if empty."""
        latest: Optional[DocumentInfo] = None

        for info in self.list_documents():
            if latest is None or info.timestamp > latest.timestamp:
                latest = info

        if latest is None:
            logger.info("No documents in index")
            return None

        logger.info(f"Most recent document: {latest.source} (ts={latest.timestamp})")
        return latest.source

"""Ingest service - PDF chunking, embedding and indexing."""

import hashlib
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..errors import EmbeddingError, IngestError
from ..models.document import Chunk, IngestReport
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)

_SEPARATORS = ("\n\n", "\n", ". ", " ")
_UNSAFE_ID_RE = re.compile(r"[^a-zA-Z0-9]")


def split_text(text: str, chunk_size: int = 400, chunk_overlap: int = 50) -> list[str]:
    """Split text into overlapping chunks, preferring natural boundaries.

    Args:
        text: Text to chunk.
        chunk_size: Maximum chunk length in characters.
        chunk_overlap: Characters shared with the previous chunk.

    Returns:
        List of chunks in document order.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be smaller than chunk_size")

    text = (text or "").strip()
    chunks: list[str] = []
    start = 0

    while start < len(text):
        end = min(start + chunk_size, len(text))
        if end < len(text):
            for sep in _SEPARATORS:
                # cut must land past the overlap so the window always advances
                cut = text.rfind(sep, start + chunk_overlap + 1, end)
                if cut != -1:
                    end = cut + len(sep)
                    break

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)

        if end >= len(text):
            break
        start = max(end - chunk_overlap, start + 1)

    return chunks


class IngestService:
    """Service for indexing PDF documents into vector store."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        docs_path: str = "./docs",
        chunk_size: int = 400,
        chunk_overlap: int = 50,
        batch_size: int = 50,
        loader=None,
    ):
        """Initialize ingest service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            docs_path: Path to documents folder.
            chunk_size: Target chunk size in characters.
            chunk_overlap: Overlap between chunks.
            batch_size: Batch size for indexing.
            loader: PDF loader; defaults to the pypdf loader.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._docs_path = Path(docs_path)
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._batch_size = batch_size

        self._loader = loader

    @property
    def loader(self):
        """Lazy load document loader."""
        if self._loader is None:
            from pdfqa.infrastructure.document_loaders import PDFLoader

            self._loader = PDFLoader()
        return self._loader

    def _compute_hash(self, content: str) -> str:
        """Compute content hash."""
        return hashlib.md5(content.encode()).hexdigest()[:12]

    def ingest_pdf(
        self, filename: str, data: bytes, timestamp: Optional[int] = None
    ) -> IngestReport:
        """Parse, chunk, embed and store one uploaded PDF.

        Args:
            filename: Original file name, used as the document source.
            data: Raw PDF bytes.
            timestamp: Upload time in epoch ms; defaults to now.

        Returns:
            Ingest report.

        Raises:
            IngestError: File is empty, unparsable or cannot be stored.
            EmbeddingError: Chunks could not be embedded.
        """
        if not data:
            raise IngestError(f"No file content for {filename}")

        if timestamp is None:
            timestamp = int(time.time() * 1000)

        try:
            pages = self.loader.load_bytes(data)
        except Exception as e:
            raise IngestError(f"PDF parsing error in {filename}: {e}") from e

        return self._ingest_pages(filename, pages, timestamp, file_size=len(data))

    def _ingest_pages(
        self, filename: str, pages: list[str], timestamp: int, file_size: int
    ) -> IngestReport:
        text = "\n\n".join(p.strip() for p in pages if p and p.strip())
        if not text:
            raise IngestError(f"No extractable text in {filename}")

        file_hash = self._compute_hash(text)
        text_chunks = split_text(text, self._chunk_size, self._chunk_overlap)

        chunks = [
            Chunk(
                content=chunk_text,
                source=filename,
                file_hash=file_hash,
                chunk_index=i,
                timestamp=timestamp,
                total_chunks=len(text_chunks),
                estimated_page=(i * len(pages)) // len(text_chunks) + 1,
            )
            for i, chunk_text in enumerate(text_chunks)
        ]

        logger.info(f"Created {len(chunks)} chunks from {filename}")
        self._index_chunks(chunks, file_size)

        return IngestReport(
            filename=filename,
            document_id=f"{filename}-{timestamp}",
            chunks=len(chunks),
            timestamp=timestamp,
            upload_date=_iso(timestamp),
            chunk_previews=[c.content[:100] + "..." for c in chunks[:3]],
        )

    def _index_chunks(self, chunks: list[Chunk], file_size: int) -> None:
        total_indexed = 0
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i : i + self._batch_size]

            ids = [
                f"{_UNSAFE_ID_RE.sub('_', c.source)}-chunk-{c.chunk_index}-{c.timestamp}"
                for c in batch
            ]
            documents = [c.content for c in batch]
            metadatas = [
                {
                    "text": c.content,
                    "source": c.source,
                    "filename": c.source,
                    "timestamp": c.timestamp,
                    "upload_date": _iso(c.timestamp),
                    "chunk_index": c.chunk_index,
                    "total_chunks": c.total_chunks,
                    "estimated_page": c.estimated_page,
                    "file_size": file_size,
                    "document_id": f"{c.source}-{c.timestamp}",
                    "file_hash": c.file_hash,
                }
                for c in batch
            ]

            try:
                embeddings = self._embedder.encode(documents).tolist()
            except Exception as e:
                raise EmbeddingError(f"Failed to embed chunks: {e}") from e

            try:
                self._vector_store.upsert(
                    ids=ids, embeddings=embeddings, documents=documents, metadatas=metadatas
                )
            except Exception as e:
                raise IngestError(f"Failed to store vectors: {e}") from e

            total_indexed += len(batch)
            logger.info(f"Indexed batch: {total_indexed}/{len(chunks)}")

    def run(self, force: bool = False) -> int:
        """Index PDFs found in the docs folder.

        Args:
            force: Force re-indexing of all documents.

        Returns:
            Number of new chunks indexed.
        """
        if not self._docs_path.exists():
            logger.error(f"Docs path not found: {self._docs_path}")
            return 0

        existing_hashes = set()
        if not force:
            for meta in self._vector_store.get_all_metadatas():
                if meta and "file_hash" in meta:
                    existing_hashes.add(meta["file_hash"])

        total_indexed = 0

        for file_path in sorted(self._docs_path.iterdir()):
            if not self.loader.supports(file_path):
                continue

            try:
                pages = self.loader.load(file_path)
            except Exception as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue

            text = "\n\n".join(p.strip() for p in pages if p and p.strip())
            if not text:
                continue

            if self._compute_hash(text) in existing_hashes:
                logger.debug(f"Skip unchanged: {file_path.name}")
                continue

            report = self._ingest_pages(
                file_path.name,
                pages,
                timestamp=int(time.time() * 1000),
                file_size=file_path.stat().st_size,
            )
            total_indexed += report.chunks

        if not total_indexed:
            logger.info("No new documents to index")
        else:
            logger.info(f"Indexing complete: {total_indexed} chunks")

        return total_indexed


def _iso(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).isoformat()

import logging
from typing import Any, Optional

import requests

from pdfqa.core.models.document import Match

logger = logging.getLogger(__name__)


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "pdf-data",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 10.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name, one per namespace.
            tenant: Tenant name.
            database: Database name.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._collection_id: Optional[str] = None
        self._timeout = timeout

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        resp = requests.get(self._collections_url, timeout=self._timeout)
        if resp.status_code == 200:
            for col in resp.json():
                if col["name"] == self._collection_name:
                    self._collection_id = col["id"]
                    return self._collection_id

        resp = requests.post(
            self._collections_url,
            json={"name": self._collection_name, "metadata": {"hnsw:space": "cosine"}},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        self._collection_id = resp.json()["id"]
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Insert or replace chunks in collection."""
        col_id = self._ensure_collection()
        resp = requests.post(
            f"{self._collections_url}/{col_id}/upsert",
            json={
                "ids": ids,
                "embeddings": embeddings,
                "documents": documents,
                "metadatas": metadatas,
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        where: Optional[dict[str, Any]] = None,
    ) -> list[Match]:
        """Search by embedding."""
        col_id = self._ensure_collection()
        payload: dict[str, Any] = {
            "query_embeddings": [query_embedding],
            "n_results": n_results,
            "include": ["documents", "metadatas", "distances"],
        }
        if where:
            payload["where"] = where

        resp = requests.post(
            f"{self._collections_url}/{col_id}/query", json=payload, timeout=self._timeout
        )
        resp.raise_for_status()

        data = resp.json()
        results = []

        if data.get("ids") and data["ids"][0]:
            for i in range(len(data["ids"][0])):
                distance = data["distances"][0][i]
                similarity = 1.0 - distance if distance is not None else None

                results.append(
                    Match.from_metadata(
                        id=data["ids"][0][i],
                        score=similarity,
                        metadata=data["metadatas"][0][i],
                        text=data["documents"][0][i],
                    )
                )

        return results

    def count(self) -> int:
        """Get chunk count."""
        col_id = self._ensure_collection()
        resp = requests.get(f"{self._collections_url}/{col_id}/count", timeout=self._timeout)
        resp.raise_for_status()
        return resp.json()

    def get_all_metadatas(self) -> list[dict]:
        """Get all chunk metadatas."""
        col_id = self._ensure_collection()
        resp = requests.post(
            f"{self._collections_url}/{col_id}/get",
            json={"include": ["metadatas"]},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return [m or {} for m in resp.json().get("metadatas", [])]

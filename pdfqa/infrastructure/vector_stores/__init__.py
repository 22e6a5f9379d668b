"""Vector store implementations."""
from .memory_store import InMemoryVectorStore

__all__ = ["InMemoryVectorStore"]


from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    # "chroma" or "memory"
    vector_backend: str = "chroma"
    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "pdf-data"
    chroma_timeout: float = 10.0

    llm_base_url: str = "http://localhost:11434/v1"
    llm_model: str = "qwen2.5:7b"
    llm_api_key: str = "ollama"
    llm_max_tokens: int = 1000
    llm_temperature: float = 0.1

    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    docs_path: str = "./docs"
    chunk_size: int = 400
    chunk_overlap: int = 50

    # Retrieval
    rag_top_k: int = 20
    rag_global_top_k: int = 30
    rag_min_relevance_score: float = 0.15
    rag_context_search_threshold: float = 0.25
    rag_primary_document_threshold: float = 0.2
    rag_tie_margin: float = 0.05

    # Selection
    rag_generic_max_chunks: int = 10
    rag_primary_max_chunks: int = 8
    rag_secondary_max_chunks: int = 2
    rag_max_total_chunks: int = 10
    rag_max_context_chars: int = 12000

    # Empty list means the built-in phrase set
    generic_phrases: list[str] = []

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def get_settings() -> Settings:
    return Settings()

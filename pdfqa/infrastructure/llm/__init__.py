"""LLM client implementations."""

"""Embedding implementations."""

"""Retrieval-augmented question answering over uploaded PDFs."""

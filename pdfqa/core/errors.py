"""Retrieval error taxonomy.

Business outcomes such as an empty corpus or a topic that is not covered are
reported through ``SearchResult.outcome`` and never raised. The exceptions
below are reserved for caller mistakes and collaborator failures.
"""


class PdfQaError(Exception):
    """Base error for the package."""


class EmptyQueryError(PdfQaError, ValueError):
    """Query text was missing or blank."""


class IndexUnavailableError(PdfQaError):
    """Vector index call failed or timed out."""


class EmbeddingError(PdfQaError):
    """Embedding collaborator failed to encode text."""


class IngestError(PdfQaError):
    """Document could not be turned into indexed chunks."""

"""Document loader implementations."""
from .pdf_loader import PDFLoader

__all__ = ["PDFLoader"]

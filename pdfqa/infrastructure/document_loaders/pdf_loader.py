import io
from pathlib import Path

from pypdf import PdfReader


class PDFLoader:

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".pdf"

    def load(self, file_path: Path) -> list[str]:
        return self._pages(PdfReader(file_path))

    def load_bytes(self, data: bytes) -> list[str]:
        return self._pages(PdfReader(io.BytesIO(data)))

    @staticmethod
    def _pages(reader: PdfReader) -> list[str]:
        pages = []
        for page in reader.pages:
            text = page.extract_text()
            pages.append(text.strip() if text else "")
        return pages

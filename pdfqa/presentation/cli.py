
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from pdfqa.config.settings import get_settings
from pdfqa.container import configure_container
from pdfqa.core.errors import PdfQaError
from pdfqa.core.services.answer_service import AnswerService
from pdfqa.core.services.ingest_service import IngestService
from pdfqa.core.services.recency_resolver import RecencyResolver
from pdfqa.core.services.search_service import SearchService

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)
logger = logging.getLogger(__name__)

USAGE = """Usage: pdfqa <command> [args]
Commands:
  ingest [file.pdf ...]   index the given PDFs, or the docs folder if none given
  documents               list indexed documents, newest first
  search <query>          show the retrieval result for a query
  ask <question>          answer a question from the indexed documents"""


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_ingest(args: list[str]) -> None:
    """Ingest command - index PDFs."""
    container = configure_container(get_settings())
    ingest_service = container.resolve(IngestService)

    if not args:
        count = ingest_service.run()
        logger.info(f"Indexed {count} chunks")
        return

    for name in args:
        path = Path(name)
        report = ingest_service.ingest_pdf(path.name, path.read_bytes())
        _print_json(asdict(report))


def cmd_documents(args: list[str]) -> None:
    """Documents command - list indexed documents."""
    container = configure_container(get_settings())
    documents = container.resolve(RecencyResolver).list_documents()
    documents.sort(key=lambda d: d.timestamp, reverse=True)
    _print_json([asdict(d) for d in documents])


def cmd_search(args: list[str]) -> None:
    """Search command - retrieval only."""
    container = configure_container(get_settings())
    result = container.resolve(SearchService).search(" ".join(args))
    _print_json(result.to_dict())


def cmd_ask(args: list[str]) -> None:
    """Ask command - retrieval plus generation."""
    container = configure_container(get_settings())
    answer_service = container.resolve(AnswerService)
    result = asyncio.run(answer_service.answer(" ".join(args)))
    _print_json(
        {
            "answer": result.answer,
            "primary_source": result.primary_source,
            "sources_used": result.sources_used,
            "search_strategy": result.search.to_dict()["search_strategy"],
            "context_message": result.search.context_message,
            "context_length": result.context_length,
        }
    )


COMMANDS = {
    "ingest": cmd_ingest,
    "documents": cmd_documents,
    "search": cmd_search,
    "ask": cmd_ask,
}


def main():
    """CLI entry point."""
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(USAGE)
        sys.exit(1)

    try:
        COMMANDS[sys.argv[1]](sys.argv[2:])
    except PdfQaError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()

import asyncio

from conftest import MINUTE_MS, NOW_MS, seed_document
from pdfqa.core.models.search import SelectedChunk
from pdfqa.core.services.answer_service import AnswerService, build_context


class FakeLLM:
    def __init__(self, reply: str = "The key risk is currency exposure."):
        self.reply = reply
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


def _chunk(source: str, text: str, score: float = 0.5) -> SelectedChunk:
    return SelectedChunk(text=text, score=score, source=source, chunk_index=0, is_primary=True)


def test_build_context_labels_each_chunk() -> None:
    context = build_context([_chunk("a.pdf", "alpha"), _chunk("b.pdf", "beta")])

    assert context == "[From: a.pdf]\nalpha\n\n---\n\n[From: b.pdf]\nbeta"


def test_answer_uses_selected_context(store, make_service) -> None:
    seed_document(store, "report.pdf", [0.4, 0.35], NOW_MS - MINUTE_MS)
    llm = FakeLLM()

    result = asyncio.run(AnswerService(llm, make_service(store)).answer("what are the key risks"))

    assert result.answer == llm.reply
    assert result.primary_source == "report.pdf"
    assert result.sources_used == ["report.pdf"]
    [prompt] = llm.prompts
    assert "[From: report.pdf]\nreport.pdf passage 0" in prompt
    assert "what are the key risks" in prompt
    assert result.context_length > 0


def test_answer_without_documents_skips_llm(store, make_service) -> None:
    llm = FakeLLM()

    result = asyncio.run(AnswerService(llm, make_service(store)).answer("summary"))

    assert llm.prompts == []
    assert "No documents" in result.answer
    assert result.sources_used == []


def test_topic_not_found_answer_carries_suggestion(store, make_service) -> None:
    seed_document(store, "new.pdf", [0.1], NOW_MS - MINUTE_MS)
    llm = FakeLLM()

    result = asyncio.run(AnswerService(llm, make_service(store)).answer("Who won the cup?"))

    assert llm.prompts == []
    assert "new.pdf" in result.answer
    assert result.search.suggestion in result.answer


def test_context_respects_character_budget(store, make_service) -> None:
    texts = ["x" * 300, "y" * 300, "z" * 300]
    seed_document(store, "long.pdf", [0.6, 0.5, 0.4], NOW_MS, texts=texts)
    llm = FakeLLM()

    service = AnswerService(llm, make_service(store), max_context_chars=700)
    result = asyncio.run(service.answer("what does the appendix say"))

    assert result.context_length <= 700
    assert result.search.query_info.chunks_used == 3
    assert "z" * 300 not in llm.prompts[0]


def test_single_oversized_chunk_is_still_sent(store, make_service) -> None:
    seed_document(store, "long.pdf", [0.6], NOW_MS, texts=["w" * 500])
    llm = FakeLLM()

    service = AnswerService(llm, make_service(store), max_context_chars=100)
    result = asyncio.run(service.answer("what does the appendix say"))

    assert result.sources_used == ["long.pdf"]
    assert "w" * 500 in llm.prompts[0]

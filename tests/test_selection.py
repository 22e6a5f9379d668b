from conftest import NOW_MS, make_match
from pdfqa.core.models.search import QueryType, SelectedChunk
from pdfqa.core.strategies.ranking import RankingEngine
from pdfqa.core.strategies.selection import ChunkSelector, SelectionLimits, truncate_to_budget

OLD = 1000


def _rank(groups):
    return RankingEngine().rank(groups, NOW_MS)


def test_primary_threshold_is_capped() -> None:
    # max 0.10 -> threshold min(0.07, 0.05) = 0.05
    matches = [
        make_match("a.pdf", score, OLD, i)
        for i, score in enumerate([0.10, 0.08, 0.06, 0.05, 0.04])
    ]

    chunks = ChunkSelector().select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert [c.score for c in chunks] == [0.10, 0.08, 0.06]
    assert all(c.is_primary for c in chunks)


def test_primary_threshold_uses_ratio_when_lower() -> None:
    # max 0.06 -> threshold min(0.042, 0.05) = 0.042
    matches = [make_match("a.pdf", s, OLD, i) for i, s in enumerate([0.06, 0.045, 0.04])]

    chunks = ChunkSelector().select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert [c.score for c in chunks] == [0.06, 0.045]


def test_primary_chunks_are_capped() -> None:
    matches = [make_match("a.pdf", 0.9 - i * 0.01, OLD, i) for i in range(12)]

    chunks = ChunkSelector().select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert len(chunks) == 8
    assert chunks == sorted(chunks, key=lambda c: c.score, reverse=True)


def test_secondary_source_fills_thin_primary() -> None:
    groups = {
        "a.pdf": [make_match("a.pdf", 0.9, OLD, 0), make_match("a.pdf", 0.7, OLD, 1)],
        "b.pdf": [
            make_match("b.pdf", 0.5, OLD, 0),
            make_match("b.pdf", 0.4, OLD, 1),
            make_match("b.pdf", 0.3, OLD, 2),
            make_match("b.pdf", 0.05, OLD, 3),
        ],
    }

    chunks = ChunkSelector().select(_rank(groups), QueryType.SPECIFIC)

    assert [(c.source, c.is_primary) for c in chunks] == [
        ("a.pdf", True),
        ("a.pdf", True),
        ("b.pdf", False),
        ("b.pdf", False),
    ]
    assert [c.score for c in chunks[2:]] == [0.5, 0.4]


def test_secondary_skipped_when_primary_has_enough() -> None:
    groups = {
        "a.pdf": [make_match("a.pdf", 0.9 - i * 0.1, OLD, i) for i in range(4)],
        "b.pdf": [make_match("b.pdf", 0.8, OLD, 0)],
    }

    chunks = ChunkSelector().select(_rank(groups), QueryType.SPECIFIC)

    assert {c.source for c in chunks} == {"a.pdf"}


def test_generic_takes_top_source_only_without_threshold() -> None:
    groups = {"recent.pdf": [make_match("recent.pdf", 0.01 * i, OLD, i) for i in range(12)]}

    chunks = ChunkSelector().select(_rank(groups), QueryType.GENERIC)

    assert len(chunks) == 10
    assert chunks[0].chunk_index == 11
    assert all(c.is_primary for c in chunks)


def test_empty_text_is_dropped() -> None:
    matches = [
        make_match("a.pdf", 0.9, OLD, 0, text=""),
        make_match("a.pdf", 0.8, OLD, 1, text="   "),
        make_match("a.pdf", 0.7, OLD, 2),
    ]

    chunks = ChunkSelector().select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert [c.chunk_index for c in chunks] == [2]


def test_text_passes_through_verbatim() -> None:
    text = "  Clause 4.2: the tenant shall pay\n€1,200 monthly.  "
    matches = [make_match("a.pdf", 0.9, OLD, 0, text=text)]

    [chunk] = ChunkSelector().select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert chunk.text == text
    assert chunk.char_count == len(text)


def test_selection_is_idempotent() -> None:
    groups = {
        "a.pdf": [make_match("a.pdf", 0.3, OLD, i) for i in range(3)],
        "b.pdf": [make_match("b.pdf", 0.29, 2000, i) for i in range(3)],
    }
    ranked = _rank(groups)
    selector = ChunkSelector()

    assert selector.select(ranked, QueryType.SPECIFIC) == selector.select(ranked, QueryType.SPECIFIC)


def test_total_chunk_limit() -> None:
    limits = SelectionLimits(primary_max_chunks=8, max_total_chunks=3)
    matches = [make_match("a.pdf", 0.9 - i * 0.01, OLD, i) for i in range(8)]

    chunks = ChunkSelector(limits).select(_rank({"a.pdf": matches}), QueryType.SPECIFIC)

    assert len(chunks) == 3


def test_no_sources_selects_nothing() -> None:
    assert ChunkSelector().select([], QueryType.SPECIFIC) == []


def test_truncate_to_budget_drops_lowest_priority_first() -> None:
    chunks = [
        SelectedChunk(text="a" * 50, score=0.9, source="a.pdf", chunk_index=0, is_primary=True),
        SelectedChunk(text="b" * 50, score=0.8, source="a.pdf", chunk_index=1, is_primary=True),
        SelectedChunk(text="c" * 50, score=0.7, source="b.pdf", chunk_index=0, is_primary=False),
    ]

    kept = truncate_to_budget(chunks, 120)

    assert [c.text[0] for c in kept] == ["a", "b"]
    assert truncate_to_budget(chunks, 150) == chunks

import pytest

from legaldoc.extraction.chunking import (
    chunk_by_sections,
    chunk_by_sentences,
    chunk_content,
    split_text,
    trailing_overlap,
)
from legaldoc.models import ChunkKind, Section
from legaldoc.profile.model import TextProcessing


def _sentences(n: int) -> str:
    return " ".join(
        f"Clause {i} says the provider keeps billing records for every member." for i in range(n)
    )


def _rebuilt(chunks) -> str:
    return " ".join(c.fresh_text.strip() for c in chunks)


def test_split_text_short_text_is_one_piece():
    assert split_text("  short text  ", max_size=100) == [("short text", 0)]
    assert split_text("", max_size=100) == []


def test_split_text_bounds_and_coverage():
    text = _sentences(40)
    pieces = split_text(text, max_size=300, overlap=60)
    assert len(pieces) > 1
    assert all(len(p) <= 300 for p, _ in pieces)
    assert pieces[0][1] == 0
    assert all(shared > 0 for _, shared in pieces[1:])
    assert " ".join(p[shared:].strip() for p, shared in pieces) == text


def test_split_text_prefers_sentence_ends():
    text = _sentences(40)
    pieces = split_text(text, max_size=300, overlap=0)
    assert all(p.endswith(".") for p, _ in pieces)


def test_split_text_without_spaces_hard_cuts():
    pieces = split_text("x" * 250, max_size=100, overlap=0)
    assert [len(p) for p, _ in pieces] == [100, 100, 50]


def test_split_text_rejects_bad_size():
    with pytest.raises(ValueError):
        split_text("x" * 10, max_size=0)


def test_trailing_overlap():
    sentences = ["aaaa aaaa.", "bbbb bbbb.", "cccc cccc."]
    assert trailing_overlap(sentences, 21) == ["bbbb bbbb.", "cccc cccc."]
    assert trailing_overlap(sentences, 10) == ["cccc cccc."]
    assert trailing_overlap(sentences, 5) == []


def test_chunk_by_sentences_bounds_overlap_and_coverage():
    text = _sentences(30)
    chunks = chunk_by_sentences(text, max_size=400, min_size=100, overlap=80)

    assert len(chunks) > 2
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(c.kind == ChunkKind.SEMANTIC for c in chunks)
    assert all(len(c.text) <= 400 for c in chunks)
    assert chunks[0].overlap == 0
    for prev, cur in zip(chunks, chunks[1:]):
        assert cur.overlap > 0
        assert prev.text.endswith(cur.text[:cur.overlap].strip())
    assert _rebuilt(chunks) == text


def test_chunk_by_sentences_short_text_single_chunk():
    chunks = chunk_by_sentences("Just one sentence here. And another one.", max_size=400)
    assert len(chunks) == 1
    assert chunks[0].overlap == 0
    assert chunks[0].id == "chunk_0"


def test_chunk_by_sentences_keeps_short_tail():
    body = "A sentence long enough to count for something here."
    text = " ".join([body] * 6) + " Tail end."
    chunks = chunk_by_sentences(text, max_size=200, min_size=100, overlap=0)
    assert chunks[-1].text.endswith("Tail end.")
    assert _rebuilt(chunks) == text


def test_chunk_by_sentences_grows_small_buffer_past_max():
    first = "Members may cancel at any time."
    second = "Refunds are issued within thirty days."
    third = "Fees are billed monthly in advance."
    max_size = len(first) + 10
    chunks = chunk_by_sentences(" ".join([first, second, third]),
                                max_size=max_size, min_size=len(first) + 5, overlap=0)

    assert len(chunks) == 2
    assert chunks[0].text == f"{first} {second}"
    assert len(chunks[0].text) > max_size
    assert chunks[1].text == third
    assert chunks[1].overlap == 0


def test_chunk_by_sentences_empty():
    assert chunk_by_sentences("") == []


def _spans(sizes):
    spans = []
    for i, size in enumerate(sizes):
        title = f"Part {chr(65 + i)}"
        body = _sentences(size // 68 + 1)[:size]
        section = Section(id=f"section_{i}", title=title, content=body, heading_level=2)
        spans.append((section, f"{title} {body}"))
    return spans


def test_chunk_by_sections_splits_oversized_sections():
    spans = _spans([300, 300, 3000, 300, 300, 300])
    chunks = chunk_by_sections(spans, max_size=1000, overlap=100)

    whole = [c for c in chunks if c.kind == ChunkKind.SECTION]
    parts = [c for c in chunks if c.kind == ChunkKind.SECTION_PART]
    assert len(whole) == 5
    assert len(parts) >= 3
    assert all(len(c.text) <= 1000 for c in parts)
    assert parts[0].title == "Part C (Part 1)"
    assert parts[0].id == "chunk_section_2_0"
    assert all(c.section_id == "section_2" for c in parts)
    assert [c.part_index for c in parts] == list(range(len(parts)))
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert _rebuilt(chunks) == " ".join(span for _, span in spans)


def test_chunk_content_picks_strategy():
    tp = TextProcessing(max_chunk_size=1000, min_chunk_size=200, overlap_size=100)
    spans = _spans([300, 300, 300, 300])
    text = " ".join(span for _, span in spans)

    by_section = chunk_content(text, spans, heading_count=4, tp=tp)
    assert {c.kind for c in by_section} == {ChunkKind.SECTION}

    by_sentence = chunk_content(text, spans, heading_count=3, tp=tp)
    assert {c.kind for c in by_sentence} == {ChunkKind.SEMANTIC}
    assert _rebuilt(by_sentence) == text

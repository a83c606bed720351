"""
Chunking of cleaned document text.

Two strategies:
- structure-aware: one chunk per section, oversized sections split into parts
- sentence-based: greedy sentence accumulation with a trailing overlap

Every chunk declares how many leading characters repeat the previous chunk
(`Chunk.overlap`), so the fresh parts of all chunks, joined with spaces,
give back the chunked text.
"""
from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from ..models import Chunk, ChunkKind, Section
from ..profile.model import TextProcessing
from .cleaning import split_sentences

# terminal punctuation that ends a sentence (followed by whitespace)
BOUNDARY_RE = re.compile(r"[.!?](?=\s)")

SectionSpan = Tuple[Section, str]


def _joined_len(parts: Sequence[str]) -> int:
    return sum(len(p) for p in parts) + max(0, len(parts) - 1)


# -----------------------
# Generic splitter
# -----------------------
def _soft_end(text: str, start: int, end: int, max_size: int) -> int:
    """Best cut in (start + max_size/2, end]: after a sentence, else at a space."""
    lo = start + max(1, max_size // 2)
    best = -1
    for m in BOUNDARY_RE.finditer(text, lo, min(len(text), end + 1)):
        if m.end() <= end:
            best = m.end()
    if best > lo:
        return best
    for i in range(end, lo, -1):
        if text[i].isspace():
            return i
    return end


def _next_start(text: str, end: int, overlap: int) -> int:
    """Start of the next piece: `overlap` chars back from `end`, snapped to a word start."""
    n = len(text)
    i = end
    if overlap > 0:
        i = max(0, end - overlap)
        while i < end and not text[i].isspace():
            i += 1
    while i < n and text[i].isspace():
        i += 1
    return i


def split_text(text: str, max_size: int = 1000, overlap: int = 100) -> List[Tuple[str, int]]:
    """
    Split `text` into pieces of at most `max_size` chars, preferring sentence
    ends in the second half of each window. Returns (piece, overlap) pairs
    where overlap counts the leading chars shared with the previous piece.
    """
    text = (text or "").strip()
    if not text:
        return []
    if max_size < 1:
        raise ValueError("max_size must be positive")
    n = len(text)
    if n <= max_size:
        return [(text, 0)]

    overlap = max(0, min(overlap, max_size // 4))
    pieces: List[Tuple[str, int]] = []
    start = 0
    prev_end = 0
    while start < n:
        end = min(start + max_size, n)
        if end < n:
            end = _soft_end(text, start, end, max_size)
        pieces.append((text[start:end].rstrip(), max(0, prev_end - start)))
        if end >= n:
            break
        prev_end = end
        start = max(_next_start(text, end, overlap), start + 1)
    return pieces


# -----------------------
# Sentence-based chunking
# -----------------------
def trailing_overlap(sentences: Sequence[str], limit: int) -> List[str]:
    """Longest run of trailing sentences whose joined length fits `limit`."""
    tail: List[str] = []
    for s in reversed(sentences):
        candidate = [s] + tail
        if _joined_len(candidate) > limit:
            break
        tail = candidate
    return tail


def _semantic_chunk(index: int, sentences: Sequence[str], carried: int) -> Chunk:
    head = _joined_len(sentences[:carried])
    return Chunk(
        id=f"chunk_{index}",
        index=index,
        text=" ".join(sentences),
        kind=ChunkKind.SEMANTIC,
        overlap=head + 1 if carried else 0,
    )


def chunk_by_sentences(text: str, max_size: int = 1000, min_size: int = 200,
                       overlap: int = 100, min_sentence_chars: int = 10) -> List[Chunk]:
    sentences = split_sentences(text, min_sentence_chars)
    chunks: List[Chunk] = []
    buf: List[str] = []
    carried = 0  # sentences at the head of buf repeated from the previous chunk

    for s in sentences:
        if not buf or _joined_len(buf) + 1 + len(s) <= max_size:
            buf.append(s)
            continue
        if _joined_len(buf) < min_size:
            # below min size: keep growing, even past max
            buf.append(s)
            continue

        chunks.append(_semantic_chunk(len(chunks), buf, carried))
        tail = trailing_overlap(buf, overlap)
        if tail and _joined_len(tail) + 1 + len(s) > max_size:
            tail = []
        buf = tail + [s]
        carried = len(tail)

    # whatever is left always becomes the last chunk, however short
    if len(buf) > carried:
        chunks.append(_semantic_chunk(len(chunks), buf, carried))
    return chunks


# -----------------------
# Structure-aware chunking
# -----------------------
def chunk_by_sections(spans: Sequence[SectionSpan], max_size: int = 1000,
                      overlap: int = 100) -> List[Chunk]:
    chunks: List[Chunk] = []
    for section, span in spans:
        span = (span or "").strip()
        if not span:
            continue
        if len(span) <= max_size:
            chunks.append(Chunk(
                id=f"chunk_{section.id}",
                index=len(chunks),
                text=span,
                kind=ChunkKind.SECTION,
                title=section.title,
                section_id=section.id,
            ))
            continue
        for j, (piece, shared) in enumerate(split_text(span, max_size, overlap)):
            chunks.append(Chunk(
                id=f"chunk_{section.id}_{j}",
                index=len(chunks),
                text=piece,
                kind=ChunkKind.SECTION_PART,
                title=f"{section.title} (Part {j + 1})",
                overlap=shared,
                section_id=section.id,
                part_index=j,
            ))
    return chunks


def chunk_content(text: str, spans: Sequence[SectionSpan], heading_count: int,
                  tp: TextProcessing) -> List[Chunk]:
    """Structure-aware chunking when the outline is rich enough, else sentence-based."""
    if heading_count >= tp.structure_min_headings and spans:
        chunks = chunk_by_sections(spans, tp.max_chunk_size, tp.overlap_size)
        if chunks:
            return chunks
    return chunk_by_sentences(text, tp.max_chunk_size, tp.min_chunk_size,
                              tp.overlap_size, tp.min_sentence_chars)

# legaldoc/profile/model.py
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Weights:
    url: float = 0.4
    title: float = 0.3
    content: float = 0.2
    structure: float = 0.1


@dataclass(frozen=True)
class Thresholds:
    # "dual": (conf >= url_confidence and url hit) or (conf >= title_confidence and title + structure hits)
    # "single": conf >= single_confidence
    verdict: str = "dual"
    url_confidence: float = 0.6
    title_confidence: float = 0.5
    single_confidence: float = 0.3
    # content signal: distinct phrase hits needed for long / short bodies
    long_document_chars: int = 2000
    long_document_phrases: int = 4
    short_document_phrases: int = 2
    min_content_chars: int = 100
    # structure signal
    min_headings: int = 5
    min_numbered_headings: int = 3
    min_legal_headings: int = 2


@dataclass(frozen=True)
class TextProcessing:
    min_document_length: int = 2000
    test_min_document_length: int = 100
    min_chunk_size: int = 200
    max_chunk_size: int = 1000
    overlap_size: int = 100
    min_sentence_chars: int = 10
    structure_min_headings: int = 4  # structure-aware chunking needs more than 3 headings
    main_content_min_chars: int = 500


@dataclass(frozen=True)
class Profile:
    name: str = "strict"
    description: str = ""
    weights: Weights = field(default_factory=Weights)
    thresholds: Thresholds = field(default_factory=Thresholds)
    text: TextProcessing = field(default_factory=TextProcessing)
    version: str = "2026-10-17"  # bump when you change defaults

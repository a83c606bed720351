# legaldoc/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .config import DEFAULT_MAX_LENGTH


class DocumentType(str, Enum):
    PRIVACY_POLICY = "privacy_policy"
    TERMS_OF_SERVICE = "terms_of_service"
    COOKIE_POLICY = "cookie_policy"
    EULA = "eula"
    USER_AGREEMENT = "user_agreement"
    LEGAL_NOTICE = "legal_notice"
    LEGAL_DOCUMENT = "legal_document"  # generic fallback


class ChunkKind(str, Enum):
    SECTION = "section"
    SECTION_PART = "section_part"
    SEMANTIC = "semantic"


class ListKind(str, Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass(frozen=True)
class PageSignature:
    url: str
    title: str
    domain: str

    @property
    def cache_key(self) -> tuple:
        # same domain + title == same page, whatever the url
        return (self.domain, self.title)


@dataclass(frozen=True)
class Position:
    """Source position of an element (line is 1-based, column 0-based)."""
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass(frozen=True)
class Heading:
    id: str
    level: int
    text: str
    position: Optional[Position] = None


@dataclass(frozen=True)
class ListBlock:
    id: str
    kind: ListKind
    items: Tuple[str, ...] = ()
    position: Optional[Position] = None


@dataclass(frozen=True)
class Table:
    id: str
    header_cells: Tuple[str, ...] = ()
    row_count: int = 0
    position: Optional[Position] = None


@dataclass(frozen=True)
class StructuralOutline:
    headings: Tuple[Heading, ...] = ()
    lists: Tuple[ListBlock, ...] = ()
    tables: Tuple[Table, ...] = ()


@dataclass(frozen=True)
class Section:
    id: str
    title: str
    content: str
    heading_level: int


@dataclass(frozen=True)
class Chunk:
    """
    One bounded unit of extracted text.
    The first `overlap` characters of `text` repeat the tail of the previous chunk.
    """
    id: str
    index: int
    text: str
    kind: ChunkKind
    title: Optional[str] = None
    overlap: int = 0
    section_id: Optional[str] = None
    part_index: Optional[int] = None

    @property
    def fresh_text(self) -> str:
        return self.text[self.overlap:]


@dataclass(frozen=True)
class Indicators:
    url_match: bool = False
    title_match: bool = False
    content_match: bool = False
    structural_match: bool = False


@dataclass(frozen=True)
class ClassificationMetadata:
    word_count: int = 0
    section_count: int = 0
    has_table_of_contents: bool = False
    last_updated_text: Optional[str] = None
    legal_phrase_count: int = 0


@dataclass(frozen=True)
class ClassificationResult:
    is_legal_document: bool
    confidence: float
    document_type: Optional[DocumentType] = None
    indicators: Indicators = field(default_factory=Indicators)
    metadata: ClassificationMetadata = field(default_factory=ClassificationMetadata)
    url: str = ""
    title: str = ""
    domain: str = ""
    skipped: bool = False
    error: Optional[str] = None

    @classmethod
    def negative(cls, url: str = "", title: str = "", domain: str = "",
                 skipped: bool = False, error: Optional[str] = None) -> "ClassificationResult":
        return cls(is_legal_document=False, confidence=0.0, url=url, title=title,
                   domain=domain, skipped=skipped, error=error)


@dataclass(frozen=True)
class ExtractOptions:
    include_metadata: bool = True
    clean_text: bool = True
    chunk_text: bool = True
    preserve_structure: bool = True
    max_length: int = DEFAULT_MAX_LENGTH

    def cache_token(self) -> str:
        return (f"meta={int(self.include_metadata)};clean={int(self.clean_text)};"
                f"chunk={int(self.chunk_text)};structure={int(self.preserve_structure)};"
                f"max={self.max_length}")


@dataclass(frozen=True)
class ExtractionResult:
    success: bool
    url: str = ""
    title: str = ""
    raw_text: str = ""
    cleaned_text: str = ""
    structure: StructuralOutline = field(default_factory=StructuralOutline)
    sections: Tuple[Section, ...] = ()
    chunks: Tuple[Chunk, ...] = ()
    word_count: int = 0
    char_count: int = 0
    reading_time_minutes: int = 0
    language: Optional[str] = None
    last_updated_text: Optional[str] = None
    truncated: bool = False
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, url: str = "", title: str = "") -> "ExtractionResult":
        return cls(success=False, url=url, title=title, error=error)

    def chunk(self, index: int) -> Chunk:
        return self.chunks[index]

"""
BeautifulSoup probes over a rendered page snapshot.

Everything here works on a soup the caller owns, and several helpers
mutate it: parse a fresh copy with `make_soup` per use.
Uses the built-in 'html.parser' to avoid native build deps.
"""
from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from ..models import Heading, ListBlock, ListKind, Position, Table

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# always dropped from the extraction copy
NOISE_TAGS = ["script", "style", "noscript", "template", "svg", "iframe",
              "nav", "header", "footer", "aside"]
# dropped everywhere, including the detector's body text
SCRIPT_TAGS = ["script", "style", "noscript", "template"]

# class/id tokens of chrome around the document: menus, ads, banners, dialogs
NOISE_HINTS = re.compile(
    r"(^|[-_])(nav|navbar|navigation|menu|sidebar|breadcrumbs?|popup|modal|"
    r"advert|advertisement|ads?|sponsored|cookie[-_]?(banner|consent|notice|bar))([-_]|$)",
    re.I,
)
# containers that are never removed by class/id hints
PROTECTED_TAGS = {"html", "body", "main", "article"}

TOC_HINTS = re.compile(r"((^|[-_])toc([-_]|$)|table[-_]?of[-_]?contents|contents|(^|[-_])index([-_]|$))", re.I)
# narrower: only what is certainly a table of contents is dropped from the extraction copy
TOC_STRIP_HINTS = re.compile(r"((^|[-_])toc([-_]|$)|table[-_]?of[-_]?contents)", re.I)

MAIN_SELECTORS = [
    "main",
    '[role="main"]',
    ".main-content",
    ".content",
    ".post-content",
    "#content",
    "#main",
    "article",
    ".legal-content",
    ".terms-content",
    ".policy-content",
]
MAIN_MIN_CHARS = 500

BLOCK_TAGS = ["p", "div", "section", "article", "main", "li", "ul", "ol", "dl", "dt", "dd",
              "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre", "table", "tr",
              "td", "th", "caption", "form", "fieldset", "address", "figure", "figcaption", "hr"]

WS_RE = re.compile(r"\s+")
MULTI_WS_RE = re.compile(r"[ \t\f\v]{2,}")
CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def sanitize(text: Optional[str]) -> str:
    """Collapse whitespace runs and drop control characters."""
    if not text:
        return ""
    return WS_RE.sub(" ", CONTROL_RE.sub("", text)).strip()


def position_of(tag: Tag) -> Position:
    return Position(line=tag.sourceline, column=tag.sourcepos)


def _hint_tokens(tag: Tag) -> List[str]:
    tokens = list(tag.get("class") or [])
    tag_id = tag.get("id")
    if tag_id:
        tokens.append(tag_id)
    return tokens


def strip_scripts(soup: BeautifulSoup) -> None:
    for tag in soup(SCRIPT_TAGS):
        if not tag.decomposed:
            tag.decompose()


def strip_noise(soup: BeautifulSoup, drop_toc: bool = False) -> int:
    """Remove non-content elements in place. Returns the number removed."""
    removed = 0
    for tag in soup(NOISE_TAGS):
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1

    candidates = [t for t in soup.find_all(True) if t.name not in PROTECTED_TAGS]
    for tag in candidates:
        if tag.decomposed:
            continue
        tokens = _hint_tokens(tag)
        if any(NOISE_HINTS.search(tok) for tok in tokens) or (
                drop_toc and any(TOC_STRIP_HINTS.search(tok) for tok in tokens)):
            tag.decompose()
            removed += 1
    return removed


def select_main_content(soup: BeautifulSoup, min_chars: int = MAIN_MIN_CHARS) -> Tag:
    """First candidate container with material text, else <body>."""
    for selector in MAIN_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and len(sanitize(el.get_text(" "))) > min_chars:
            return el
    return soup.body or soup


def block_text(root: Tag) -> str:
    """
    Text of `root` with line breaks around block elements.
    Mutates `root` (newline strings are inserted), so pass a copy you own.
    """
    for tag in root.find_all(BLOCK_TAGS + ["br"]):
        if tag.name == "br":
            tag.replace_with("\n")
            continue
        tag.insert_before("\n")
        tag.insert_after("\n")

    lines = []
    for line in CONTROL_RE.sub("", root.get_text()).splitlines():
        line = MULTI_WS_RE.sub(" ", line.replace("\xa0", " ")).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)


def read_headings(root: Tag) -> List[Heading]:
    headings = []
    for el in root.find_all(HEADING_TAGS):
        text = sanitize(el.get_text(" "))
        if not text:
            continue
        headings.append(Heading(
            id=f"heading_{len(headings)}",
            level=int(el.name[1]),
            text=text,
            position=position_of(el),
        ))
    return headings


def read_lists(root: Tag) -> List[ListBlock]:
    blocks = []
    for i, el in enumerate(root.find_all(["ul", "ol"])):
        items = [sanitize(li.get_text(" ")) for li in el.find_all("li")]
        blocks.append(ListBlock(
            id=f"list_{i}",
            kind=ListKind.ORDERED if el.name == "ol" else ListKind.UNORDERED,
            items=tuple(t for t in items if t),
            position=position_of(el),
        ))
    return blocks


def read_tables(root: Tag) -> List[Table]:
    tables = []
    for i, el in enumerate(root.find_all("table")):
        tables.append(Table(
            id=f"table_{i}",
            header_cells=tuple(sanitize(th.get_text(" ")) for th in el.find_all("th")),
            row_count=len(el.find_all("tr")),
            position=position_of(el),
        ))
    return tables


def has_table_of_contents(root: Tag) -> bool:
    for tag in root.find_all(True):
        if any(TOC_HINTS.search(tok) for tok in _hint_tokens(tag)):
            return True
    return False


def page_title(soup: BeautifulSoup) -> str:
    if soup.title and soup.title.string:
        return sanitize(soup.title.string)
    return ""

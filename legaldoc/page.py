# legaldoc/page.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from .models import Heading, ListBlock, PageSignature, Table
from .parsers import html_parser


def extract_domain(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


@dataclass(frozen=True)
class PageView:
    """
    Read-only snapshot of a rendered page.

    `html` is the serialized DOM at snapshot time; the remaining fields are
    probes over it. Build one with `PageView.from_html`, or construct it
    directly in tests with synthetic values.
    """
    url: str
    title: str
    html: str = ""
    body_text: str = ""
    headings: Tuple[Heading, ...] = ()
    lists: Tuple[ListBlock, ...] = ()
    tables: Tuple[Table, ...] = ()
    has_table_of_contents: bool = False

    @property
    def domain(self) -> str:
        return extract_domain(self.url)

    @property
    def signature(self) -> PageSignature:
        return PageSignature(url=self.url, title=self.title, domain=self.domain)

    @classmethod
    def from_html(cls, html: str, url: str, title: Optional[str] = None) -> "PageView":
        soup = html_parser.make_soup(html)
        html_parser.strip_scripts(soup)
        if title is None:
            title = html_parser.page_title(soup)

        root = soup.body or soup
        headings = html_parser.read_headings(root)
        lists = html_parser.read_lists(root)
        tables = html_parser.read_tables(root)
        has_toc = html_parser.has_table_of_contents(root)
        body_text = html_parser.sanitize(html_parser.block_text(root))

        return cls(
            url=url,
            title=title,
            html=html or "",
            body_text=body_text,
            headings=tuple(headings),
            lists=tuple(lists),
            tables=tuple(tables),
            has_table_of_contents=has_toc,
        )

# legaldoc/detection/rules.py
"""
Rule tables for the legal-document detector.

Each rule is a (pattern, weight, doc_type) record; order matters where a
rule also supplies a document type (first match wins). Weights are the
per-rule contribution inside its signal and default to 1.0; the signal
weights themselves live in the tuning profile.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern
from urllib.parse import urlparse

from ..models import DocumentType


@dataclass(frozen=True)
class Rule:
    pattern: Pattern[str]
    weight: float = 1.0
    doc_type: Optional[DocumentType] = None

    def matches(self, text: str) -> bool:
        return bool(text) and self.pattern.search(text) is not None


def _path_rule(token: str, doc_type: Optional[DocumentType]) -> Rule:
    # token must sit between path separators (or at the end of the path)
    return Rule(re.compile(rf"(?:^|/){token}(?=$|[/.;])", re.I), 1.0, doc_type)


def _title_rule(phrase: str, doc_type: Optional[DocumentType]) -> Rule:
    return Rule(re.compile(rf"^\s*{phrase}\b", re.I), 1.0, doc_type)


_SEP = r"[-_]?"

# Ordered by type specificity: privacy > terms > cookie > eula > legal notice > generic
URL_RULES: List[Rule] = [
    _path_rule(rf"privacy(?:{_SEP}(?:policy|notice|statement))?", DocumentType.PRIVACY_POLICY),
    _path_rule(rf"data{_SEP}(?:protection|policy)", DocumentType.PRIVACY_POLICY),
    _path_rule(rf"terms(?:{_SEP}(?:of{_SEP}|and{_SEP})?(?:service|use|conditions))?", DocumentType.TERMS_OF_SERVICE),
    _path_rule(rf"(?:tos|tou|conditions{_SEP}of{_SEP}use)", DocumentType.TERMS_OF_SERVICE),
    _path_rule(rf"cookies?(?:{_SEP}(?:policy|notice|statement))", DocumentType.COOKIE_POLICY),
    _path_rule(rf"(?:eula|end{_SEP}user{_SEP}licen[cs]e(?:{_SEP}agreement)?)", DocumentType.EULA),
    _path_rule(rf"(?:legal(?:{_SEP}notice)?|imprint|impressum)", DocumentType.LEGAL_NOTICE),
    _path_rule(rf"user{_SEP}agreement", DocumentType.LEGAL_DOCUMENT),
    _path_rule(rf"acceptable{_SEP}use(?:{_SEP}policy)?", DocumentType.LEGAL_DOCUMENT),
]

TITLE_RULES: List[Rule] = [
    _title_rule(r"privacy\s+(?:policy|notice|statement)", DocumentType.PRIVACY_POLICY),
    _title_rule(r"terms\s+(?:of\s+)?(?:service|use)", DocumentType.TERMS_OF_SERVICE),
    _title_rule(r"terms\s+(?:and|&)\s+conditions", DocumentType.TERMS_OF_SERVICE),
    _title_rule(r"cookie\s+(?:policy|notice)", DocumentType.COOKIE_POLICY),
    _title_rule(r"user\s+agreement", DocumentType.USER_AGREEMENT),
    _title_rule(r"end[\s-]+user\s+licen[cs]e(?:\s+agreement)?", DocumentType.EULA),
    _title_rule(r"eula", DocumentType.EULA),
    _title_rule(r"legal\s+(?:notice|disclaimer)", DocumentType.LEGAL_NOTICE),
    _title_rule(r"acceptable\s+use\s+policy", DocumentType.LEGAL_DOCUMENT),
]

# Legal-register vocabulary; the content signal counts distinct hits
CONTENT_INDICATORS: List[str] = [
    "by using this service",
    "by accessing this website",
    "these terms of service",
    "this privacy policy",
    "personal information",
    "data collection",
    "we collect",
    "your rights",
    "binding agreement",
    "legal obligations",
    "intellectual property",
    "limitation of liability",
    "governing law",
    "dispute resolution",
    "data processing",
    "collect information",
    "third parties",
]

LEGAL_SECTION_RULES: List[Rule] = [
    Rule(re.compile(p, re.I)) for p in (
        r"acceptance\s+of\s+(?:the\s+)?terms",
        r"use\s+of\s+(?:the\s+)?service",
        r"user\s+conduct",
        r"intellectual\s+property",
        r"privacy\s+and\s+data",
        r"termination",
        r"disclaimer",
        r"limitation\s+of\s+liability",
        r"governing\s+law",
        r"dispute\s+resolution",
        r"indemnification",
    )
]

NUMBERED_HEADING = re.compile(r"^\s*(?:\d+(?:\.\d+)*\.?|[ivxlc]+\.|section\s+\d+)\s", re.I)

# Pages that are a priori not legal documents: search, social, shopping, news, blogs
SKIP_HOST_RULES: List[Rule] = [
    Rule(re.compile(p, re.I)) for p in (
        r"(?:^|\.)google\.[a-z.]+$",
        r"(?:^|\.)bing\.com$",
        r"(?:^|\.)duckduckgo\.com$",
        r"(?:^|\.)search\.yahoo\.com$",
        r"(?:^|\.)(?:facebook|twitter|x|instagram|tiktok|youtube|reddit|pinterest)\.com$",
        r"(?:^|\.)(?:amazon|ebay|etsy|aliexpress)\.[a-z.]+$",
        r"(?:^|\.)(?:cnn|nytimes|theguardian|foxnews)\.com$",
        r"(?:^|\.)bbc\.(?:com|co\.uk)$",
        r"(?:^|\.)(?:medium\.com|blogspot\.com|wordpress\.com|substack\.com)$",
    )
]

SKIP_PATH_RULES: List[Rule] = [
    Rule(re.compile(p, re.I)) for p in (
        r"(?:^|/)(?:search|results)(?=$|/)",
        r"(?:^|/)(?:blog|blogs|news|articles?|posts?)(?=/)",
        r"(?:^|/)(?:cart|checkout|product|products|shop)(?=$|/)",
        r"(?:^|/)watch(?=$|/)",
    )
]

SKIP_QUERY = re.compile(r"(?:^|&)q=", re.I)

SKIP_TITLE_RULES: List[Rule] = [
    Rule(re.compile(p, re.I)) for p in (
        r"^\s*\d+\s+(?:tips|ways|reasons|things|ideas)\b",
        r"\bsearch\s+results\b",
        r"^\s*how\s+to\b",
        r"\b(?:breaking\s+news|recipe)\b",
    )
]

LAST_UPDATED_PATTERNS: List[Pattern[str]] = [
    re.compile(r"last\s+updated:?\s*([^.\n]+)", re.I),
    re.compile(r"effective\s+date:?\s*([^.\n]+)", re.I),
    re.compile(r"revised:?\s*([^.\n]+)", re.I),
    re.compile(r"updated\s+on:?\s*([^.\n]+)", re.I),
    re.compile(r"last\s+modified:?\s*([^.\n]+)", re.I),
]


def first_match(rules: Iterable[Rule], text: str) -> Optional[Rule]:
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


def url_path(url: str) -> str:
    try:
        return urlparse(url).path or "/"
    except ValueError:
        return ""


def match_url(url: str) -> Optional[Rule]:
    return first_match(URL_RULES, url_path(url))


def match_title(title: str) -> Optional[Rule]:
    return first_match(TITLE_RULES, title)


def should_skip(url: str, title: str) -> bool:
    """Cheap early-exit filter for pages unrelated to legal documents."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    if first_match(SKIP_HOST_RULES, host):
        return True
    if first_match(SKIP_PATH_RULES, parsed.path or ""):
        return True
    if SKIP_QUERY.search(parsed.query or ""):
        return True
    return first_match(SKIP_TITLE_RULES, title) is not None


def find_content_indicators(text: str) -> List[str]:
    lower = (text or "").lower()
    return [phrase for phrase in CONTENT_INDICATORS if phrase in lower]


def count_numbered_headings(headings: Iterable[str]) -> int:
    return sum(1 for h in headings if NUMBERED_HEADING.match(h))


def count_legal_headings(headings: Iterable[str]) -> int:
    return sum(1 for h in headings if first_match(LEGAL_SECTION_RULES, h))


def find_last_updated(text: str) -> Optional[str]:
    for pattern in LAST_UPDATED_PATTERNS:
        m = pattern.search(text or "")
        if m:
            value = m.group(1).strip()
            if value:
                return value[:120]
    return None


# legaldoc/detection/detector.py
from __future__ import annotations

import time
from typing import Dict, Optional, Tuple

from ..errors import AnalysisFailure
from ..log import debug, err, info
from ..models import (
    ClassificationMetadata,
    ClassificationResult,
    DocumentType,
    Indicators,
)
from ..page import PageView
from ..profile.loader import get_profile
from ..profile.model import Profile
from . import rules


class Detector:
    """
    Decide whether a page is a legal document, and which kind.

    Four independent signals (url, title, content, structure) add their
    profile weights to the confidence. Results are cached per instance by
    (domain, title) until `clear_cache()` is called.
    """

    def __init__(self, profile: Optional[Profile] = None,
                 cache: Optional[Dict[Tuple[str, str], ClassificationResult]] = None):
        self.profile = profile or get_profile()
        self._cache: Dict[Tuple[str, str], ClassificationResult] = cache if cache is not None else {}
        self._last: Optional[ClassificationResult] = None

    @property
    def last_result(self) -> Optional[ClassificationResult]:
        return self._last

    def clear_cache(self) -> None:
        self._cache.clear()
        self._last = None
        debug("Detection cache cleared")

    def classify(self, page: PageView) -> ClassificationResult:
        """Classify `page`. Never raises: faults become a negative result with `error` set."""
        start = time.perf_counter()
        url = getattr(page, "url", "") or ""
        title = getattr(page, "title", "") or ""
        try:
            signature = page.signature
            key = signature.cache_key
            cached = self._cache.get(key)
            if cached is not None:
                debug(f"Using cached detection result for {url}")
                self._last = cached
                return cached

            if rules.match_url(url) is None and rules.should_skip(url, title):
                result = ClassificationResult.negative(url=url, title=title,
                                                       domain=signature.domain, skipped=True)
            else:
                result = self._score(page)

            self._cache[key] = result
            self._last = result
            ms = (time.perf_counter() - start) * 1000
            info(f"Page analysis completed in {ms:.2f}ms: legal={result.is_legal_document} "
                 f"confidence={result.confidence} type={_type_name(result.document_type)}")
            return result
        except Exception as e:
            fault = AnalysisFailure(f"Page analysis failed: {str(e) or type(e).__name__}")
            err(f"{fault} ({url})")
            return ClassificationResult.negative(url=url, title=title, error=str(fault))

    # -----------------------
    # Signals
    # -----------------------
    def _score(self, page: PageView) -> ClassificationResult:
        w = self.profile.weights
        confidence = 0.0
        doc_type: Optional[DocumentType] = None

        # 1. url
        url_rule = rules.match_url(page.url)
        if url_rule is not None:
            confidence += w.url * url_rule.weight
            doc_type = url_rule.doc_type

        # 2. title
        title_rule = rules.match_title(page.title)
        if title_rule is not None:
            confidence += w.title * title_rule.weight
            if doc_type is None:
                doc_type = title_rule.doc_type

        # 3. content
        phrases = rules.find_content_indicators(page.body_text)
        content_match = self._content_signal(page.body_text, len(phrases))
        if content_match:
            confidence += w.content

        # 4. structure
        structural_match = self._structure_signal(page)
        if structural_match:
            confidence += w.structure

        confidence = min(1.0, max(0.0, round(confidence, 4)))
        indicators = Indicators(
            url_match=url_rule is not None,
            title_match=title_rule is not None,
            content_match=content_match,
            structural_match=structural_match,
        )
        is_legal = self._verdict(confidence, indicators)
        if is_legal and doc_type is None:
            doc_type = DocumentType.LEGAL_DOCUMENT

        return ClassificationResult(
            is_legal_document=is_legal,
            confidence=confidence,
            document_type=doc_type if is_legal else None,
            indicators=indicators,
            metadata=ClassificationMetadata(
                word_count=len(page.body_text.split()),
                section_count=len(page.headings),
                has_table_of_contents=page.has_table_of_contents,
                last_updated_text=rules.find_last_updated(page.body_text),
                legal_phrase_count=len(phrases),
            ),
            url=page.url,
            title=page.title,
            domain=page.domain,
        )

    def _content_signal(self, text: str, hits: int) -> bool:
        t = self.profile.thresholds
        n = len(text or "")
        if n < t.min_content_chars:
            return False
        needed = t.long_document_phrases if n > t.long_document_chars else t.short_document_phrases
        return hits >= needed

    def _structure_signal(self, page: PageView) -> bool:
        t = self.profile.thresholds
        texts = [h.text for h in page.headings]
        if len(texts) < t.min_headings:
            return False
        return (
            rules.count_numbered_headings(texts) >= t.min_numbered_headings
            or rules.count_legal_headings(texts) >= t.min_legal_headings
            or page.has_table_of_contents
        )

    def _verdict(self, confidence: float, ind: Indicators) -> bool:
        t = self.profile.thresholds
        if t.verdict == "single":
            return confidence >= t.single_confidence
        return (
            (confidence >= t.url_confidence and ind.url_match)
            or (confidence >= t.title_confidence and ind.title_match and ind.structural_match)
        )


def _type_name(doc_type: Optional[DocumentType]) -> str:
    return doc_type.value if doc_type else "-"

# legaldoc/pipeline.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .detection.detector import Detector
from .extraction.extractor import Extractor
from .log import debug
from .models import ClassificationResult, ExtractionResult, ExtractOptions
from .page import PageView


@dataclass
class Analysis:
    classification: ClassificationResult
    extraction: Optional[ExtractionResult] = None


class Analyzer:
    """
    Minimal orchestrator: classify, then extract only legal documents.
    A change of URL between calls counts as navigation and drops both caches.
    """

    def __init__(self, detector: Optional[Detector] = None, extractor: Optional[Extractor] = None):
        self.detector = detector or Detector()
        self.extractor = extractor or Extractor(self.detector.profile)
        self._url: Optional[str] = None

    def navigate(self, url: str) -> None:
        if self._url is not None and url != self._url:
            debug(f"Navigation {self._url} -> {url}; clearing caches")
            self.detector.clear_cache()
            self.extractor.clear_cache()
        self._url = url

    def analyze(self, page: PageView, options: Optional[ExtractOptions] = None) -> Analysis:
        self.navigate(page.url)
        verdict = self.detector.classify(page)
        if not verdict.is_legal_document:
            return Analysis(classification=verdict)
        return Analysis(classification=verdict, extraction=self.extractor.extract(page, options))

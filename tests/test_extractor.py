from dataclasses import FrozenInstanceError
from unittest.mock import patch

import pytest

from legaldoc import config
from legaldoc.extraction.cleaning import clean_text
from legaldoc.extraction.extractor import Extractor, is_test_url, locate_sections
from legaldoc.models import ChunkKind, ExtractOptions, Heading
from legaldoc.page import PageView

SHORT_TEXT = ("These terms govern access to the service. By using it you agree to them. "
              "If you do not agree, do not use the service at all, please. Thank you kindly.")

HEADINGS = ["Eligibility", "Accounts", "Payments and Billing", "Content Ownership",
            "Termination", "Contact Information"]


def _long_terms_html() -> str:
    small = "<p>" + " ".join(["This part sets out the rules that apply to the matter named above."] * 4) + "</p>"
    big = "<p>" + " ".join(
        f"Clause {i} explains how the provider stores, reviews and deletes the records of each member."
        for i in range(34)
    ) + "</p>"
    body = "".join(
        f"<h2>{h}</h2>{big if h == 'Payments and Billing' else small}" for h in HEADINGS
    )
    return f"<html><head><title>Terms of Service</title></head><body><main>{body}</main></body></html>"


def _rebuilt(chunks) -> str:
    return " ".join(c.fresh_text.strip() for c in chunks)


def test_is_test_url():
    assert is_test_url("http://localhost:8000/terms")
    assert is_test_url("http://127.0.0.1/terms")
    assert is_test_url("file:///tmp/page.html")
    assert is_test_url("https://shop.test/terms")
    assert is_test_url("https://acme.example/test-terms")
    assert not is_test_url("https://acme.example/terms")
    assert not is_test_url("https://contest.example/terms")


def test_short_text_needs_a_test_url():
    assert len(SHORT_TEXT) == 150
    live = Extractor().extract(PageView(url="https://acme.example/terms", title="Terms",
                                        body_text=SHORT_TEXT))
    assert not live.success
    assert "Insufficient content" in live.error
    assert live.chunks == ()

    local = Extractor().extract(PageView(url="http://localhost/terms", title="Terms",
                                         body_text=SHORT_TEXT))
    assert local.success
    assert local.cleaned_text == SHORT_TEXT


def test_extracts_privacy_fixture(privacy_page):
    result = Extractor().extract(privacy_page)
    assert result.success
    assert result.title == "Privacy Policy - Acme"

    # chrome and the table of contents are gone
    for noise in ("Products", "Accept", "All rights reserved", "dataLayer"):
        assert noise not in result.cleaned_text
    assert result.cleaned_text.startswith("Privacy Policy Last updated: March 1, 2024.")
    assert result.cleaned_text.count("Governing Law") == 1

    assert len(result.structure.headings) == 8
    assert [s.title for s in result.sections][:2] == ["Privacy Policy", "1. Information We Collect"]
    assert result.sections[1].content.startswith("This privacy policy explains")
    assert len(result.sections) == 8

    assert all(c.kind == ChunkKind.SECTION for c in result.chunks)
    assert len(result.chunks) == 8
    assert result.chunks[6].title == "6. Governing Law"
    assert _rebuilt(result.chunks) == result.cleaned_text

    assert result.word_count == len(result.cleaned_text.split())
    assert result.char_count == len(result.cleaned_text)
    assert result.reading_time_minutes >= 2
    assert result.language == "en"
    assert result.last_updated_text == "March 1, 2024"
    assert not result.truncated


def test_oversized_section_is_split_into_parts():
    page = PageView.from_html(_long_terms_html(), "http://localhost/terms")
    result = Extractor().extract(page)
    assert result.success

    whole = [c for c in result.chunks if c.kind == ChunkKind.SECTION]
    parts = [c for c in result.chunks if c.kind == ChunkKind.SECTION_PART]
    assert len(whole) == 5
    assert len(parts) >= 3
    assert all(len(c.text) <= 1000 for c in parts)
    assert {c.title for c in parts} >= {"Payments and Billing (Part 1)", "Payments and Billing (Part 3)"}
    assert _rebuilt(result.chunks) == result.cleaned_text


def test_without_structure_uses_sentence_chunks():
    page = PageView.from_html(_long_terms_html(), "http://localhost/terms")
    result = Extractor().extract(page, ExtractOptions(preserve_structure=False))
    assert result.success
    assert result.sections == ()
    assert result.structure.headings == ()
    assert {c.kind for c in result.chunks} == {ChunkKind.SEMANTIC}
    assert _rebuilt(result.chunks) == result.cleaned_text


def test_options_switch_steps_off(privacy_page):
    result = Extractor().extract(privacy_page, ExtractOptions(chunk_text=False, include_metadata=False))
    assert result.success
    assert result.chunks == ()
    assert result.word_count == 0
    assert result.language is None
    assert result.sections


def test_truncation_warns(privacy_page):
    with patch("legaldoc.extraction.extractor.warn") as warn:
        result = Extractor().extract(privacy_page, ExtractOptions(max_length=1000))
    assert result.success
    assert result.truncated
    assert len(result.cleaned_text) == 1000
    warn.assert_called_once_with("Text truncated to 1000 characters")


@pytest.mark.parametrize("max_length", [0, -5, True, "100", 2.5, config.MAX_LENGTH_CEILING + 1])
def test_invalid_options_are_reported(privacy_page, max_length):
    result = Extractor().extract(privacy_page, ExtractOptions(max_length=max_length))
    assert not result.success
    assert "max_length" in result.error


def test_results_are_cached_per_options(privacy_page):
    cache = {}
    extractor = Extractor(cache=cache)
    first = extractor.extract(privacy_page)
    assert extractor.extract(privacy_page) is first
    assert extractor.last_result is first
    assert (privacy_page.url, ExtractOptions().cache_token()) in cache

    other = extractor.extract(privacy_page, ExtractOptions(chunk_text=False))
    assert other is not first
    assert len(cache) == 2

    extractor.clear_cache()
    assert cache == {}
    assert extractor.last_result is None


def test_faults_are_reported_and_not_cached(privacy_page):
    cache = {}
    extractor = Extractor(cache=cache)
    with patch("legaldoc.extraction.extractor.chunk_content", side_effect=RuntimeError("boom")):
        failed = extractor.extract(privacy_page)
    assert not failed.success
    assert failed.error == "Text extraction failed: boom"
    assert cache == {}
    assert extractor.extract(privacy_page).success


def test_heading_words_in_body_do_not_split_sections():
    bodies = {h: f"This part covers {h.lower()} for every member of the service, old and new."
              for h in HEADINGS}
    bodies["Content Ownership"] = ("You keep ownership of what you post here. We may remove it "
                                   "as set out in Termination below, at any time.")
    bodies["Termination"] = "This is the termination body. Either party may end the agreement."
    body = "".join(f"<h2>{h}</h2><p>{bodies[h]}</p>" for h in HEADINGS)
    html = f"<html><head><title>Terms of Service</title></head><body><main>{body}</main></body></html>"

    result = Extractor().extract(PageView.from_html(html, "http://localhost/terms"))
    assert result.success
    assert [s.title for s in result.sections] == HEADINGS

    by_title = {s.title: s for s in result.sections}
    assert by_title["Content Ownership"].content.endswith("as set out in Termination below, at any time.")
    assert by_title["Termination"].content == bodies["Termination"]

    assert [c.title for c in result.chunks] == HEADINGS
    assert result.chunks[4].text.startswith("Termination This is the termination body.")
    assert _rebuilt(result.chunks) == result.cleaned_text


def test_cached_results_cannot_be_altered(privacy_page):
    extractor = Extractor()
    first = extractor.extract(privacy_page)

    with pytest.raises(AttributeError):
        first.chunks.clear()
    with pytest.raises(AttributeError):
        first.structure.headings.append(Heading(id="heading_99", level=2, text="Injected"))
    with pytest.raises(FrozenInstanceError):
        first.chunks = ()
    with pytest.raises(FrozenInstanceError):
        first.chunks[0].text = "changed"
    with pytest.raises(FrozenInstanceError):
        first.sections[1].content = ""

    again = extractor.extract(privacy_page)
    assert again is first
    assert len(again.chunks) == 8
    assert again.sections[1].content.startswith("This privacy policy explains")


RAW = "Welcome to Acme.\nScope\nThese terms apply to the Scope of use.\nFees\nYou pay monthly."
OUTLINE = [Heading(id="heading_0", level=2, text="Scope"),
           Heading(id="heading_1", level=2, text="Missing"),
           Heading(id="heading_2", level=2, text="Fees")]


def test_locate_sections_intro_and_fallback():
    text = clean_text(RAW)
    sections, spans = locate_sections(text, RAW, OUTLINE)
    assert [s.title for s in sections] == ["Introduction", "Scope", "Fees"]
    assert sections[0].heading_level == 0
    assert sections[1].content == "These terms apply to the Scope of use."
    assert sections[2].content == "You pay monthly."
    assert " ".join(span for _, span in spans) == text

    sections, _ = locate_sections(text, RAW, [])
    assert [s.title for s in sections] == ["Main Content"]
    assert sections[0].content == text


def test_locate_sections_follows_truncated_and_raw_text():
    text = clean_text(RAW)[:30]
    sections, _ = locate_sections(text, RAW, OUTLINE)
    assert [s.title for s in sections] == ["Introduction", "Scope"]
    assert sections[1].content == "These t"

    sections, spans = locate_sections(RAW, RAW, OUTLINE, clean=False)
    assert [s.content for s in sections] == ["Welcome to Acme.", "These terms apply to the Scope of use.",
                                             "You pay monthly."]
    assert "\n".join(span for _, span in spans) == RAW

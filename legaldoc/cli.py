# legaldoc/cli.py
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from .detection.detector import Detector
from .extraction.extractor import Extractor
from .fetchers.http_fetcher import fetch_html
from .models import ClassificationResult, ExtractionResult, ExtractOptions
from .page import PageView
from .pipeline import Analyzer
from .profile.loader import get_profile, list_profiles
from .profile.model import Profile
from . import config

app = typer.Typer(help="legaldoc: detect legal documents and extract them into chunks")


# -----------------------
# Helpers
# -----------------------
def _profile(name: Optional[str]) -> Profile:
    try:
        return get_profile(name)
    except KeyError as e:
        raise typer.BadParameter(str(e.args[0]), param_hint="--profile")


def _load_page(source: str, url: Optional[str], title: Optional[str]) -> PageView:
    """SOURCE is an http(s) URL to fetch or a saved HTML file."""
    if source.startswith(("http://", "https://")):
        html, status, error = fetch_html(source)
        if html is None:
            typer.echo(f"Fetch failed for {source}: {error}", err=True)
            raise typer.Exit(code=2)
        return PageView.from_html(html, url or source, title)

    path = Path(source)
    if not path.is_file():
        raise typer.BadParameter(f"No such file: {source}", param_hint="SOURCE")
    html = path.read_text(encoding="utf-8", errors="ignore")
    return PageView.from_html(html, url or path.resolve().as_uri(), title)


def _dump(obj) -> str:
    return json.dumps(asdict(obj), ensure_ascii=False, indent=2)


def _echo_classification(r: ClassificationResult) -> None:
    typer.echo(f"legal document: {'yes' if r.is_legal_document else 'no'}")
    typer.echo(f"confidence:     {r.confidence:.2f}")
    typer.echo(f"type:           {r.document_type.value if r.document_type else '-'}")
    ind = r.indicators
    typer.echo(f"signals:        url={ind.url_match} title={ind.title_match} "
               f"content={ind.content_match} structure={ind.structural_match}")
    if r.skipped:
        typer.echo("skipped:        early exit (page is not a legal-document candidate)")
    if r.metadata.last_updated_text:
        typer.echo(f"last updated:   {r.metadata.last_updated_text}")
    if r.error:
        typer.echo(f"error:          {r.error}")


def _echo_extraction(r: ExtractionResult) -> None:
    if not r.success:
        typer.echo(f"extraction failed: {r.error}")
        return
    typer.echo(f"words: {r.word_count}  chars: {r.char_count}  "
               f"reading time: {r.reading_time_minutes} min  language: {r.language or '-'}")
    if r.truncated:
        typer.echo("(text truncated)")
    typer.echo(f"headings: {len(r.structure.headings)}  lists: {len(r.structure.lists)}  "
               f"tables: {len(r.structure.tables)}  sections: {len(r.sections)}")
    typer.echo(f"\nChunks ({len(r.chunks)}):")
    for c in r.chunks:
        label = f" {c.title}" if c.title else ""
        typer.echo(f" - [{c.index}] {c.kind.value}{label}: {len(c.text)} chars")


def _options(max_length: int, clean: bool, chunks: bool, structure: bool, metadata: bool) -> ExtractOptions:
    return ExtractOptions(include_metadata=metadata, clean_text=clean, chunk_text=chunks,
                          preserve_structure=structure, max_length=max_length)


# -----------------------
# Commands
# -----------------------
@app.command()
def classify(
    source: str = typer.Argument(..., help="HTML file or http(s) URL"),
    url: Optional[str] = typer.Option(None, help="Page URL to assume for a local file"),
    title: Optional[str] = typer.Option(None, help="Override the document <title>"),
    profile: Optional[str] = typer.Option(None, help="Tuning profile (strict, lax, or a YAML profile)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """
    Decide whether SOURCE is a legal document.
    """
    page = _load_page(source, url, title)
    result = Detector(_profile(profile)).classify(page)
    if as_json:
        typer.echo(_dump(result))
    else:
        _echo_classification(result)


@app.command()
def extract(
    source: str = typer.Argument(..., help="HTML file or http(s) URL"),
    url: Optional[str] = typer.Option(None, help="Page URL to assume for a local file"),
    title: Optional[str] = typer.Option(None, help="Override the document <title>"),
    profile: Optional[str] = typer.Option(None, help="Tuning profile"),
    max_length: int = typer.Option(config.DEFAULT_MAX_LENGTH, help="Truncate cleaned text to this many chars"),
    clean: bool = typer.Option(True, "--clean/--no-clean", help="Clean extracted text"),
    chunks: bool = typer.Option(True, "--chunks/--no-chunks", help="Chunk the text"),
    structure: bool = typer.Option(True, "--structure/--no-structure", help="Extract outline and sections"),
    metadata: bool = typer.Option(True, "--metadata/--no-metadata", help="Compute word count, language, ..."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """
    Extract cleaned text, outline and chunks from SOURCE.
    """
    page = _load_page(source, url, title)
    result = Extractor(_profile(profile)).extract(page, _options(max_length, clean, chunks, structure, metadata))
    if as_json:
        typer.echo(_dump(result))
    else:
        _echo_extraction(result)
    if not result.success:
        raise typer.Exit(code=1)


@app.command("chunks")
def show_chunk(
    source: str = typer.Argument(..., help="HTML file or http(s) URL"),
    index: int = typer.Option(0, "--index", "-i", help="Chunk index to print"),
    url: Optional[str] = typer.Option(None, help="Page URL to assume for a local file"),
    profile: Optional[str] = typer.Option(None, help="Tuning profile"),
) -> None:
    """
    Print one chunk of SOURCE by index.
    """
    page = _load_page(source, url, None)
    result = Extractor(_profile(profile)).extract(page)
    if not result.success:
        typer.echo(f"extraction failed: {result.error}")
        raise typer.Exit(code=1)
    if not 0 <= index < len(result.chunks):
        typer.echo(f"index out of range: {index} (have {len(result.chunks)} chunks)")
        raise typer.Exit(code=1)
    c = result.chunk(index)
    typer.echo(f"[{c.index + 1}/{len(result.chunks)}] {c.kind.value} {c.title or ''}".rstrip())
    typer.echo(c.text)


@app.command()
def analyze(
    source: str = typer.Argument(..., help="HTML file or http(s) URL"),
    url: Optional[str] = typer.Option(None, help="Page URL to assume for a local file"),
    title: Optional[str] = typer.Option(None, help="Override the document <title>"),
    profile: Optional[str] = typer.Option(None, help="Tuning profile"),
) -> None:
    """
    Classify SOURCE and, if it is a legal document, extract it.
    """
    p = _profile(profile)
    page = _load_page(source, url, title)
    analysis = Analyzer(Detector(p), Extractor(p)).analyze(page)
    _echo_classification(analysis.classification)
    if analysis.extraction is not None:
        typer.echo("")
        _echo_extraction(analysis.extraction)


@app.command()
def profiles() -> None:
    """
    List available tuning profiles.
    """
    for name in list_profiles():
        p = get_profile(name)
        typer.echo(f"{name:<12} {p.thresholds.verdict:<7} min_doc={p.text.min_document_length:<6} {p.description}")


if __name__ == "__main__":
    app()

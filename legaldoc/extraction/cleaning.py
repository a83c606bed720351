import math
import re
from typing import List

ZERO_WIDTH_RE = re.compile(r"[\u200B-\u200D\u2060\uFEFF]")
CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
WS_RE = re.compile(r"\s+")

# Leading list markers: "1.", "2)", "a)", "iv.", bullets and dashes
LIST_MARKER_RE = re.compile(r"^\s*(?:\d{1,3}[.)]|[a-z]\)|[ivx]{1,4}\.|[•·▪◦‣∙●○■□\-*–—]|â€¢)\s+", re.I)
# Bullet glyphs left over in the middle of a line
STRAY_BULLET_RE = re.compile(r"(?:(?<=\s)|^)(?:[•·▪◦‣∙●○■□]|â€¢)(?=\s|$)")
# "end.Next" -> "end. Next" (needs two lowercase letters so "U.S.A" survives)
SENTENCE_JOIN_RE = re.compile(r"(?<=[a-z]{2}[.!?])(?=[A-Z])")
# "policyTerms" -> "policy Terms", introduced when tags were stripped
CAMEL_JOIN_RE = re.compile(r"(?<=[a-z]{2})(?=[A-Z][a-z]{2})")

# Sentence splitter: break after terminal punctuation followed by whitespace
SENT_SPLIT = re.compile(r"(?<=[.!?])\s+")

COMMON_ENGLISH = {"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
WORDS_PER_MINUTE = 200


def clean_text(raw_text: str) -> str:
    """
    Normalize extracted page text into one whitespace-collapsed string.
    Lossy: list markers, bullets and line structure are dropped.
    """
    if not raw_text:
        return ""
    t = ZERO_WIDTH_RE.sub("", raw_text)
    t = CONTROL_RE.sub("", t)

    lines = []
    for line in t.splitlines():
        line = LIST_MARKER_RE.sub("", line.strip())
        line = STRAY_BULLET_RE.sub(" ", line)
        if line.strip():
            lines.append(line.strip())

    t = " ".join(lines)
    t = SENTENCE_JOIN_RE.sub(" ", t)
    t = CAMEL_JOIN_RE.sub(" ", t)
    return WS_RE.sub(" ", t).strip()


def split_sentences(text: str, min_chars: int = 10) -> List[str]:
    """
    Split on sentence punctuation. Fragments under `min_chars` are merged into
    the following sentence (or the previous one at the end), so joining the
    result with single spaces gives back the whitespace-normalized text.
    """
    if not text:
        return []
    out: List[str] = []
    pending = ""
    for s in SENT_SPLIT.split(text.strip()):
        s = WS_RE.sub(" ", s).strip()
        if not s:
            continue
        if pending:
            s = f"{pending} {s}"
            pending = ""
        if len(s) < min_chars:
            pending = s
            continue
        out.append(s)
    if pending:
        if out:
            out[-1] = f"{out[-1]} {pending}"
        else:
            out.append(pending)
    return out


def word_count(text: str) -> int:
    return len(text.split()) if text else 0


def reading_time_minutes(words: int) -> int:
    return int(math.ceil(words / WORDS_PER_MINUTE)) if words else 0


def detect_language(text: str) -> str:
    """Crude check: 'en' when common English function words make up over 2% of words."""
    words = text.lower().split() if text else []
    if not words:
        return "unknown"
    hits = sum(1 for w in words if w in COMMON_ENGLISH)
    return "en" if hits / len(words) > 0.02 else "unknown"

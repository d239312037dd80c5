"""Normalization, tokenization, and duration utilities for fact comparison."""

import re

# Connective words that carry no identity in titles, degrees, or institution names
STOP_WORDS = {"a", "an", "and", "at", "for", "in", "of", "on", "the", "to", "&", "-"}

OPEN_ENDED_MARKERS = ("present", "current", "now", "today", "ongoing")

MONTHS = {
    "jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
    "january", "february", "march", "april", "june", "july", "august", "september",
    "october", "november", "december",
}

_DURATION_SPLIT_RE = re.compile(r"\s*(?:-|–|—|\bto\b|\buntil\b)\s*", re.IGNORECASE)


def normalize_key(text: str) -> str:
    """Lowercase, trim, and collapse internal whitespace."""
    return " ".join((text or "").lower().split())


def tokenize(text: str) -> set[str]:
    """Split text into a set of lowercase word tokens, dropping stop words."""
    words = re.findall(r"[a-z0-9+#]+(?:\.[a-z0-9]+)*", normalize_key(text))
    return {w for w in words if w not in STOP_WORDS}


def token_overlap(text1: str, text2: str) -> float:
    """Shared tokens as a fraction of the smaller token set (0.0-1.0).

    "Developer" vs "Senior Developer" scores 1.0 so a title promotion at the
    same employer is recognized as the same underlying role.
    """
    tokens1 = tokenize(text1)
    tokens2 = tokenize(text2)

    if not tokens1 or not tokens2:
        return 1.0 if normalize_key(text1) == normalize_key(text2) else 0.0

    overlap = tokens1 & tokens2
    return len(overlap) / min(len(tokens1), len(tokens2))


def _date_components(part: str) -> int:
    tokens = re.findall(r"[a-z]+|\d+", part.lower())
    return sum(1 for t in tokens if (t.isdigit() and len(t) in (1, 2, 4)) or t in MONTHS)


def duration_specificity(duration: str) -> tuple[int, int, int]:
    """Rank a duration string: (both ends concrete, date components, length).

    "Jan 2020 - Mar 2022" outranks "2020-2022", which outranks "2020-present".
    """
    text = (duration or "").strip()
    if not text:
        return (0, 0, 0)

    parts = [p for p in _DURATION_SPLIT_RE.split(text) if p.strip()]
    lowered = text.lower()
    open_ended = any(marker in lowered for marker in OPEN_ENDED_MARKERS)
    closed = len(parts) >= 2 and not open_ended and all(_date_components(p) for p in parts)

    return (1 if closed else 0, sum(_date_components(p) for p in parts), len(text))


def is_more_specific_duration(candidate: str, current: str) -> bool:
    """True if candidate should replace current; ties keep current."""
    return duration_specificity(candidate) > duration_specificity(current)

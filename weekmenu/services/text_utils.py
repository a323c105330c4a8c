# weekmenu/services/text_utils.py
from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Tuple

_WORD_SPLIT_RE = re.compile(r"[\s\-]+")


def strip_accents(s: str) -> str:
    s = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in s if unicodedata.category(ch) != "Mn")


def dutch_sort_key(text: str) -> Tuple[str, str]:
    """
    Collation key approximating Dutch ordering:
    accents and case are ignored at the primary level ("crème" sorts with "creme"),
    the original text breaks ties so the order stays total.
    """
    t = (text or "").strip()
    return strip_accents(t).casefold(), t


def long_words(text: str, min_len: int = 4) -> List[str]:
    """Lowercased words split on whitespace/hyphens, short words ("de", "en") dropped."""
    return [w for w in _WORD_SPLIT_RE.split((text or "").lower()) if len(w) >= min_len]


def normalize_tags(tags: Iterable[str] | None) -> Tuple[str, ...]:
    """Lowercase, trim and dedupe tags, keeping first-seen order."""
    out = (str(t).strip().lower() for t in (tags or []))
    return tuple(dict.fromkeys(t for t in out if t))

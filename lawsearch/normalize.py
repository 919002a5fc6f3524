from __future__ import annotations

"""
Text normalization utilities used across the recommender.

``normalize_name`` produces the comparison key used for every name,
alias and query comparison: catalog merging, whitelist checks, lexical
scoring and result de-duplication all go through it so they agree on
what "the same name" means.  The remaining helpers clean catalog text
(HTML stripping, unicode and whitespace normalization) before it is
stored or shown.
"""

import re
import unicodedata
from typing import List, Set

from bs4 import BeautifulSoup

from .config import MAX_INPUT_CHARS


# ---------------------------
# Comparison keys
# ---------------------------

_SINGLE_QUOTES_RE = re.compile("[‘’]")
_DOUBLE_QUOTES_RE = re.compile("[“”]")
_DASHES_RE = re.compile("[–—]")
_SYMBOLS_RE = re.compile("[@™©®]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9 ]+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(text: str | None) -> str:
    """
    Canonicalize a resource name or query into a comparison key.

    Steps, in order:

    - curly quotes and dashes become their ASCII forms
    - lowercase
    - ``&`` becomes ``and``
    - ``@``, trademark and copyright marks become spaces
    - any other character outside ``[a-z0-9 ]`` becomes a space
    - whitespace runs collapse to one space, edges trimmed

    Never fails: ``None`` or empty input gives ``""``.  The result is a
    fixed point, so ``normalize_name(normalize_name(x)) == normalize_name(x)``.
    """
    if not text:
        return ""
    s = str(text)
    s = _SINGLE_QUOTES_RE.sub("'", s)
    s = _DOUBLE_QUOTES_RE.sub('"', s)
    s = _DASHES_RE.sub("-", s)
    s = s.lower()
    s = s.replace("&", "and")
    s = _SYMBOLS_RE.sub(" ", s)
    s = _NON_ALNUM_RE.sub(" ", s)
    return _WHITESPACE_RE.sub(" ", s).strip()


def tokens_of(normalized: str) -> List[str]:
    """Split an already-normalized string on spaces, dropping empties."""
    return [t for t in normalized.split(" ") if t]


def token_set(text: str | None) -> Set[str]:
    """Normalize ``text`` and return its distinct tokens."""
    return set(tokens_of(normalize_name(text)))


# ---------------------------
# Text cleaning
# ---------------------------

def clamp_text_length(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """
    Hard cap on input size so oversized queries never reach the
    scorers or the recommender prompt.
    """
    if not isinstance(text, str):
        text = str(text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def strip_html(raw: str) -> str:
    """
    Strip HTML tags using BeautifulSoup, then clean up whitespace and
    spacing around punctuation.  LibGuide exports often carry markup
    in descriptions.
    """
    if not raw:
        return ""
    # Fast path: if there's no '<', it's almost certainly not HTML
    if "<" not in raw:
        return raw

    soup = BeautifulSoup(raw, "lxml")
    text = soup.get_text(" ", strip=True)
    text = normalize_whitespace(text)
    # Remove spaces before common punctuation marks
    return re.sub(r"\s+([.,!?;:])", r"\1", text)


def normalize_unicode(text: str) -> str:
    """
    Normalize unicode into NFC so visually identical strings compare
    equal.  Curly quotes are left alone for display.
    """
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def normalize_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs into a single space and strip edges.
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def basic_clean(text) -> str:
    """
    End-to-end display cleaning used for catalog fields:

    - strip HTML
    - normalize unicode
    - normalize whitespace

    Casing and punctuation are preserved; this is not a comparison key.
    """
    if text is None:
        return ""
    text = strip_html(str(text))
    text = normalize_unicode(text)
    return normalize_whitespace(text)


def clean_query(text: str) -> str:
    """Clamp and whitespace-normalize a raw user query."""
    if text is None:
        return ""
    return normalize_whitespace(clamp_text_length(str(text)))

from __future__ import annotations

"""
Validation of recommender suggestions against the known resource names.

The recommender is asked to pick only from the shortlist, so a name
that does not match exactly is usually formatting drift ("Westlaw Edge"
for "Westlaw").  Validation is therefore loose: exact name or alias,
otherwise the shorter of the two normalized strings (at least
``FUZZY_MIN_LENGTH`` chars) must occur inside the longer.  A name with
no such relationship to anything known is rejected.

The platform filter is a separate, earlier pass that removes
suggestions which read like subject guides ("Contract Law", "Tax
Research Guide") rather than research platforms; local guides are
scored on their own and should not arrive through the recommender.
"""

import re
from typing import Dict, FrozenSet, Iterable, List, Sequence, TypeVar

from loguru import logger

from .config import (
    FUZZY_MIN_LENGTH,
    GUIDE_CATEGORY_PHRASES,
    GUIDE_PHRASES,
    KNOWN_DATABASES,
    PLATFORM_WORDS,
    VENDOR_TOKENS,
    RankedResult,
    ResourceEntry,
)
from .normalize import normalize_name

T = TypeVar("T", RankedResult, ResourceEntry)


class Whitelist:
    """Known resource names and aliases, merged by normalized name."""

    def __init__(self, entries: Sequence[ResourceEntry]) -> None:
        self.entries: tuple[ResourceEntry, ...] = tuple(entries)
        names = {normalize_name(e.name) for e in self.entries}
        aliases = {normalize_name(a) for e in self.entries for a in e.aliases}
        self.exact_names: FrozenSet[str] = frozenset(n for n in names if n)
        self.alias_names: FrozenSet[str] = frozenset(a for a in aliases if a)
        # names first, then aliases, for the substring scan
        self._candidates: tuple[str, ...] = tuple(sorted(self.exact_names)) + tuple(
            sorted(self.alias_names - self.exact_names)
        )

    @classmethod
    def merge(cls, *lists: Iterable[ResourceEntry]) -> "Whitelist":
        """
        Merge several name lists; the first display name wins and
        aliases are unioned.
        """
        merged: Dict[str, ResourceEntry] = {}
        for items in lists:
            for item in items:
                key = normalize_name(item.name)
                if not key:
                    continue
                existing = merged.get(key)
                if existing is None:
                    merged[key] = ResourceEntry(name=item.name, aliases=tuple(item.aliases))
                    continue
                aliases = list(existing.aliases)
                for a in item.aliases:
                    if a not in aliases:
                        aliases.append(a)
                merged[key] = ResourceEntry(name=existing.name, aliases=tuple(aliases))
        whitelist = cls(list(merged.values()))
        if not whitelist.entries:
            logger.warning("Merged whitelist is empty; recommender suggestions will all be rejected.")
        return whitelist

    def __len__(self) -> int:
        return len(self.entries)

    def is_plausible(self, suggested_name: str) -> bool:
        n = normalize_name(suggested_name)
        if not n:
            return False
        if n in self.exact_names or n in self.alias_names:
            return True
        for c in self._candidates:
            short, long = (c, n) if len(c) <= len(n) else (n, c)
            if len(short) >= FUZZY_MIN_LENGTH and short in long:
                return True
        return False

    def filter(self, suggestions: Iterable[T]) -> List[T]:
        """Keep plausible suggestions; the rest are dropped silently."""
        kept: List[T] = []
        for s in suggestions:
            if self.is_plausible(s.name):
                kept.append(s)
            else:
                logger.debug("Dropping suggestion not on whitelist: {!r}", s.name)
        return kept


# ---------------------------
# Platform / guide filter
# ---------------------------

_KNOWN_DATABASES = frozenset(normalize_name(n) for n in KNOWN_DATABASES)
_VENDOR_TOKENS = tuple(normalize_name(t) for t in VENDOR_TOKENS)
_PLATFORM_RE = re.compile(r"\b(" + "|".join(PLATFORM_WORDS) + r")\b")
_GUIDE_RE = re.compile(r"\b(" + "|".join(re.escape(p) for p in GUIDE_PHRASES) + r")\b")
_CATEGORY_RE = re.compile(r"\b(" + "|".join(re.escape(p) for p in GUIDE_CATEGORY_PHRASES) + r")\b")


def looks_like_platform(name: str) -> bool:
    n = normalize_name(name)
    if n in _KNOWN_DATABASES:
        return True
    if any(t in n for t in _VENDOR_TOKENS):
        return True
    return bool(_PLATFORM_RE.search(n))


def looks_like_guide(name: str) -> bool:
    n = normalize_name(name)
    if _GUIDE_RE.search(n) or _CATEGORY_RE.search(n):
        return True
    # bare subject names such as "Administrative Law"
    return n.endswith(" law") or n == "law"


def filter_guides(items: Iterable[T]) -> List[T]:
    """Drop items that read like subject guides unless they name a platform."""
    kept: List[T] = []
    for item in items:
        if looks_like_platform(item.name) or not looks_like_guide(item.name):
            kept.append(item)
        else:
            logger.debug("Dropping guide-like suggestion: {!r}", item.name)
    return kept

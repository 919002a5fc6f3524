from __future__ import annotations

"""
Direct lexical scoring of the library's own catalogs.

Local subject guides and LibGuide assets are scored against the query
without involving the external recommender, so they still surface
when it is slow or down.  Both catalogs use the same algorithm with
different weights (see :class:`~lawsearch.config.LocalScorerSettings`):

* ``NAME_MATCH_POINTS`` when the query and the name contain one
  another, plus the scorer's ``topic_boost`` when the name is a short
  general topic rather than a jurisdiction-specific variant;
* ``TOKEN_MATCH_POINTS`` per distinct query token of at least
  ``MIN_TOKEN_LENGTH`` chars found in the name, description and
  aliases/subjects;
* ``ALIAS_MATCH_POINTS`` once if any alias or subject and the query
  contain one another.

The raw points map to ``min(ceiling, base + points * SCORE_MULTIPLIER)``.
Entries with no points are left out.
"""

import re
from typing import List, Sequence

from loguru import logger

from .config import (
    ALIAS_MATCH_POINTS,
    ASSET_SCORER,
    GENERAL_TOPIC_MAX_WORDS,
    GUIDE_SCORER,
    JURISDICTION_QUALIFIERS,
    MIN_TOKEN_LENGTH,
    NAME_MATCH_POINTS,
    SCORE_MULTIPLIER,
    TOKEN_MATCH_POINTS,
    LocalScorerSettings,
    RankedResult,
    ResourceEntry,
)
from .normalize import normalize_name, tokens_of

_JURISDICTION_RE = re.compile(
    r"\b(" + "|".join(re.escape(q) for q in sorted(JURISDICTION_QUALIFIERS, key=len, reverse=True)) + r")\b"
)


def is_jurisdiction_specific(name: str) -> bool:
    """True when the name carries a country or region qualifier."""
    return bool(_JURISDICTION_RE.search(normalize_name(name)))


def is_general_topic(name: str) -> bool:
    n = normalize_name(name)
    return not is_jurisdiction_specific(n) and len(tokens_of(n)) <= GENERAL_TOPIC_MAX_WORDS


def _contains_either_way(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return a in b or b in a


class LocalRelevanceScorer:
    """Scores one local catalog against queries."""

    def __init__(self, entries: Sequence[ResourceEntry], settings: LocalScorerSettings) -> None:
        self.entries = tuple(e for e in entries if e.name)
        self.settings = settings

    def raw_score(self, query: str, entry: ResourceEntry) -> int:
        q = normalize_name(query)
        if not q:
            return 0
        name = normalize_name(entry.name)
        score = 0

        if _contains_either_way(name, q):
            score += NAME_MATCH_POINTS
            if is_general_topic(name):
                score += self.settings.topic_boost

        haystack = normalize_name(" ".join([entry.name, entry.description or "", *entry.aliases]))
        hay_tokens = set(tokens_of(haystack))
        for token in set(tokens_of(q)):
            if len(token) >= MIN_TOKEN_LENGTH and token in hay_tokens:
                score += TOKEN_MATCH_POINTS

        if any(_contains_either_way(normalize_name(a), q) for a in entry.aliases):
            score += ALIAS_MATCH_POINTS

        return score

    def relevance(self, raw: int) -> int:
        return min(self.settings.ceiling, self.settings.base + raw * SCORE_MULTIPLIER)

    def score_entry(self, query: str, entry: ResourceEntry) -> int:
        """Relevance 0..ceiling; 0 means the entry does not match."""
        raw = self.raw_score(query, entry)
        return self.relevance(raw) if raw > 0 else 0

    def search(self, query: str) -> List[RankedResult]:
        """Top ``settings.limit`` matching entries, best first."""
        results: List[RankedResult] = []
        for entry in self.entries:
            raw = self.raw_score(query, entry)
            if raw <= 0:
                continue
            results.append(
                RankedResult(
                    name=entry.name,
                    relevance_score=self.relevance(raw),
                    match_reason=self.settings.match_reason,
                    type_tag=self.settings.type_tag,
                    url=entry.url,
                    description=entry.description
                    or self.settings.default_description.format(name=entry.name),
                )
            )
        results.sort(key=lambda r: -r.relevance_score)
        top = results[: self.settings.limit]
        logger.info("Local {} matched {} entries, keeping {}", self.settings.label, len(results), len(top))
        return top


def guide_scorer(entries: Sequence[ResourceEntry]) -> LocalRelevanceScorer:
    return LocalRelevanceScorer(entries, GUIDE_SCORER)


def asset_scorer(entries: Sequence[ResourceEntry]) -> LocalRelevanceScorer:
    return LocalRelevanceScorer(entries, ASSET_SCORER)

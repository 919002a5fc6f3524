from __future__ import annotations

"""
Lexical scoring and allowlist shortlisting.

Before the external recommender is called we pick a small, query
relevant subset of the external database catalog to offer it.  The
recommender is told to choose only from that list, which keeps its
prompt short and its answers easy to validate.

Scoring is plain token overlap: one point per distinct query token
found among the tokens of the name and its aliases, plus
``SUBSTRING_BOOST`` when the whole normalized query appears inside
them.  If nothing overlaps at all the shortlist falls back to the first
names alphabetically so the recommender never gets an empty list.

Example::

    from lawsearch.retrieval import shortlist
    names = shortlist("securities regulation", external_entries, cap=60)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from loguru import logger

from .config import SHORTLIST_CAP, SUBSTRING_BOOST, ResourceEntry
from .normalize import normalize_name, tokens_of


@dataclass(frozen=True)
class ScoredCandidate:
    name: str
    score: int


def lexical_score(query: str, name: str, aliases: Iterable[str] = ()) -> int:
    """Token-overlap score of ``query`` against a name and its aliases."""
    q = normalize_name(query)
    if not q:
        return 0
    haystack = normalize_name(" ".join([name or "", *[a for a in aliases if a]]))
    if not haystack:
        return 0
    hay_tokens = set(tokens_of(haystack))
    score = sum(1 for t in set(tokens_of(q)) if t in hay_tokens)
    if q in haystack:
        score += SUBSTRING_BOOST
    return score


def score_candidates(query: str, entries: Iterable[ResourceEntry]) -> List[ScoredCandidate]:
    """Score every entry and keep the ones with any overlap, best first."""
    scored: List[ScoredCandidate] = []
    for entry in entries:
        s = lexical_score(query, entry.name, entry.aliases)
        if s > 0:
            scored.append(ScoredCandidate(name=entry.name, score=s))
    # stable sort keeps catalog order among ties
    scored.sort(key=lambda c: -c.score)
    return scored


def _best_per_name(scored: Sequence[ScoredCandidate]) -> List[ScoredCandidate]:
    best: Dict[str, ScoredCandidate] = {}
    for cand in scored:
        key = normalize_name(cand.name)
        prev = best.get(key)
        if prev is None or cand.score > prev.score:
            best[key] = cand
    return list(best.values())


def shortlist(query: str, entries: Sequence[ResourceEntry], cap: int = SHORTLIST_CAP) -> List[str]:
    """
    Return up to ``cap`` entry names to offer the recommender.

    Names are de-duplicated by normalized form (best score kept) and
    ordered by score.  With no overlap at all, the first ``cap`` names
    in case-insensitive alphabetical order are returned instead, so a
    non-empty ``entries`` always yields a non-empty list.
    """
    if cap <= 0 or not entries:
        return []

    scored = score_candidates(query, entries)
    logger.info("Scoring {!r} against {} allowlist entries: {} matches", query, len(entries), len(scored))

    if not scored:
        fallback = sorted((e.name for e in entries), key=str.casefold)
        logger.info("No lexical matches, using alphabetical fallback")
        return fallback[:cap]

    best = _best_per_name(scored)
    best.sort(key=lambda c: -c.score)
    names = [c.name for c in best[:cap]]
    logger.debug("Top allowlist items: {}", names[:5])
    return names

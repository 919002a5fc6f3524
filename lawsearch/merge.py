from __future__ import annotations

"""
Merging of result groups into the final ranked list.

Recommender suggestions and the two local scorers each produce their
own ranked group.  :func:`merge_results` folds them together: one entry
per normalized name (the higher relevance wins, the earlier group wins
ties), sorted by relevance, then cut by a relevance floor and a result
count ceiling.  The floor drops entries outright; nothing below it is
kept to pad the list.
"""

from typing import Dict, Iterable, List

from loguru import logger

from .config import MAX_RESULTS, MIN_RELEVANCE_SCORE, RankedResult
from .normalize import normalize_name


def dedupe_best(groups: Iterable[Iterable[RankedResult]]) -> List[RankedResult]:
    """One result per normalized name, keeping the highest relevance."""
    best: Dict[str, RankedResult] = {}
    for group in groups:
        for item in group:
            key = normalize_name(item.name)
            if not key:
                continue
            prev = best.get(key)
            if prev is None or item.relevance_score > prev.relevance_score:
                best[key] = item
    return list(best.values())


def merge_results(
    *groups: Iterable[RankedResult],
    min_relevance: int = MIN_RELEVANCE_SCORE,
    max_results: int = MAX_RESULTS,
) -> List[RankedResult]:
    """
    Merge result groups into one list sorted by relevance.

    Results scoring below ``min_relevance`` are discarded and at most
    ``max_results`` are returned.
    """
    merged = dedupe_best(groups)
    merged.sort(key=lambda r: -r.relevance_score)
    kept = [r for r in merged if r.relevance_score >= min_relevance][: max(0, max_results)]
    logger.info(
        "Merged {} unique results, {} above floor {} (cap {})",
        len(merged),
        len(kept),
        min_relevance,
        max_results,
    )
    return kept

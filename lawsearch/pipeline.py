from __future__ import annotations

"""
End-to-end search pipeline.

:func:`build_context` runs once at startup and turns the loaded
catalogs into the read-only structures every query needs: the merged
catalog index, the whitelist, the recommender allowlist and the two
local scorers.  :func:`process` then handles one query against that
context:

1. shortlist external databases for the recommender;
2. ask the recommender (bounded by a timeout) and keep only plausible,
   platform-like suggestions;
3. score local guides and LibGuide assets directly;
4. merge, floor and cap all groups;
5. enrich the survivors from the catalog index.

Any failure of the recommender, or output that cannot be parsed, is
treated as "no suggestions" and the local groups carry the result.

Example::

    from lawsearch.catalog_build import load_catalogs
    from lawsearch.pipeline import build_context, process
    from lawsearch.recommender import GeminiRecommender

    context = build_context(load_catalogs())
    results = await process("utah water rights", context, GeminiRecommender())
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from loguru import logger

from .catalog_build import Catalogs
from .catalog_index import CatalogIndex, build_index
from .config import (
    MAX_RESULTS,
    MIN_RELEVANCE_SCORE,
    RECOMMENDER_TIMEOUT,
    SHORTLIST_CAP,
    RankedResult,
    ResourceEntry,
)
from .local_search import LocalRelevanceScorer, asset_scorer, guide_scorer
from .mapping import enrich_results
from .merge import merge_results
from .normalize import clean_query
from .recommender import coerce_suggestions, parse_json_loose
from .retrieval import shortlist
from .whitelist import Whitelist, filter_guides

Recommend = Callable[[str, Sequence[str]], Awaitable[Any]]


@dataclass(frozen=True)
class SearchContext:
    """Per-process, read-only state shared by every query."""

    index: CatalogIndex
    whitelist: Whitelist
    allowlist: tuple[ResourceEntry, ...]
    guides: LocalRelevanceScorer
    assets: LocalRelevanceScorer
    catalog_counts: Dict[str, int] = field(default_factory=dict)
    missing_sources: tuple[str, ...] = ()


def build_context(catalogs: Catalogs) -> SearchContext:
    """
    Build the shared search context from loaded catalogs.

    Catalogs are indexed external first and local guides last so that
    curated text is only used where an external record has none.  A
    missing whitelist file is replaced by the catalog it shadows.
    """
    index = build_index([catalogs.external, catalogs.local_assets, catalogs.local_guides])

    guide_names = catalogs.guide_whitelist or catalogs.local_guides
    external_names = catalogs.external_whitelist or catalogs.external
    whitelist = Whitelist.merge(guide_names, external_names, catalogs.local_assets)

    context = SearchContext(
        index=index,
        whitelist=whitelist,
        allowlist=tuple(catalogs.external),
        guides=guide_scorer(catalogs.local_guides),
        assets=asset_scorer(catalogs.local_assets),
        catalog_counts=catalogs.counts(),
        missing_sources=tuple(catalogs.missing_sources),
    )
    logger.info(
        "Search context ready: index={}, whitelist={}, allowlist={}",
        len(index),
        len(whitelist),
        len(context.allowlist),
    )
    if catalogs.missing_sources:
        logger.warning("Running with a reduced catalog; missing sources: {}", list(catalogs.missing_sources))
    return context


@dataclass
class SearchOutcome:
    results: List[RankedResult]
    allowlist_sent: int = 0
    suggestions_parsed: int = 0
    suggestions_accepted: int = 0
    local_guide_matches: int = 0
    asset_matches: int = 0
    recommender_failed: bool = False
    recommender_error: Optional[str] = None
    whitelist_skipped: bool = False

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "allowlistSent": self.allowlist_sent,
            "suggestionsParsed": self.suggestions_parsed,
            "aiResults": self.suggestions_accepted,
            "localGuideResults": self.local_guide_matches,
            "assetResults": self.asset_matches,
            "totalResults": len(self.results),
            "recommenderFailed": self.recommender_failed,
            "recommenderError": self.recommender_error,
            "whitelistSkipped": self.whitelist_skipped,
            "enrichedWithUrl": sum(1 for r in self.results if r.url),
            "enrichedWithDesc": sum(1 for r in self.results if r.description),
        }


def _as_suggestion_list(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return parse_json_loose(raw)
    if isinstance(raw, (list, tuple)):
        return list(raw)
    logger.warning("Recommender returned unsupported type {}; ignoring", type(raw).__name__)
    return []


async def _ask_recommender(
    recommend: Recommend,
    query: str,
    allowed: Sequence[str],
    timeout: float,
    outcome: SearchOutcome,
) -> List[RankedResult]:
    try:
        raw = await asyncio.wait_for(recommend(query, list(allowed)), timeout=timeout)
        return coerce_suggestions(_as_suggestion_list(raw))
    except asyncio.TimeoutError:
        outcome.recommender_failed = True
        outcome.recommender_error = f"timed out after {timeout:g}s"
    except Exception as e:
        outcome.recommender_failed = True
        outcome.recommender_error = str(e)[:200]
    logger.warning("Recommender unavailable ({}); using local results only", outcome.recommender_error)
    return []


async def run_pipeline(
    query: str,
    context: SearchContext,
    recommend: Optional[Recommend] = None,
    *,
    timeout: float = RECOMMENDER_TIMEOUT,
    shortlist_cap: int = SHORTLIST_CAP,
    min_relevance: int = MIN_RELEVANCE_SCORE,
    max_results: int = MAX_RESULTS,
    apply_guide_filter: bool = True,
    skip_whitelist: bool = False,
) -> SearchOutcome:
    """
    Run one query and return results with diagnostics.

    ``skip_whitelist`` keeps guide-filtered recommender output without
    whitelist validation; it exists for troubleshooting only.
    """
    q = clean_query(query)
    if not q:
        return SearchOutcome(results=[])

    outcome = SearchOutcome(results=[], whitelist_skipped=skip_whitelist)
    accepted: List[RankedResult] = []

    if recommend is not None:
        allowed = shortlist(q, context.allowlist, cap=shortlist_cap)
        outcome.allowlist_sent = len(allowed)
        if allowed:
            suggestions = await _ask_recommender(recommend, q, allowed, timeout, outcome)
            outcome.suggestions_parsed = len(suggestions)
            if apply_guide_filter:
                suggestions = filter_guides(suggestions)
            accepted = suggestions if skip_whitelist else context.whitelist.filter(suggestions)
    outcome.suggestions_accepted = len(accepted)

    guides = context.guides.search(q)
    assets = context.assets.search(q)
    outcome.local_guide_matches = len(guides)
    outcome.asset_matches = len(assets)

    merged = merge_results(accepted, guides, assets, min_relevance=min_relevance, max_results=max_results)
    outcome.results = enrich_results(merged, context.index)
    logger.info(
        "Query {!r}: {} AI, {} guides, {} assets -> {} results",
        q,
        len(accepted),
        len(guides),
        len(assets),
        len(outcome.results),
    )
    return outcome


async def process(
    query: str,
    context: SearchContext,
    recommend: Optional[Recommend] = None,
    **options: Any,
) -> List[RankedResult]:
    """Ranked, enriched results for ``query``; never raises on recommender failure."""
    outcome = await run_pipeline(query, context, recommend, **options)
    return outcome.results

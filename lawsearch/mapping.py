from __future__ import annotations

"""
Enrichment of ranked results with catalog details, and conversion to
the API payload shape.

Results from the recommender carry little more than a name and a
reason; local results already carry their own url and description.
:func:`enrich_results` looks each name up in the catalog index and
fills in url, description and type.  A type already set by the scorer
that produced the result is never replaced.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .catalog_index import CatalogIndex
from .config import (
    DESCRIPTION_MAX_CHARS,
    DESCRIPTION_TRUNCATE_TO,
    ELLIPSIS,
    TYPE_FLAGS,
    RankedResult,
    TypeTag,
)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def ensure_scheme(url: Optional[str]) -> Optional[str]:
    """Prefix ``https://`` to a url that has no explicit http(s) scheme."""
    if not url:
        return None
    url = url.strip()
    if not url:
        return None
    if not _SCHEME_RE.match(url):
        url = "https://" + url
    return url


def truncate_description(text: str) -> str:
    if len(text) > DESCRIPTION_MAX_CHARS:
        return text[:DESCRIPTION_TRUNCATE_TO] + ELLIPSIS
    return text


def enrich_result(result: RankedResult, index: CatalogIndex) -> RankedResult:
    info = index.lookup(result.name)

    raw_desc = (info.description if info else None) or result.description or result.match_reason or ""
    description = truncate_description(raw_desc) or None
    url = ensure_scheme((info.url if info else None) or result.url)

    type_tag = result.type_tag
    if type_tag is None and info is not None:
        type_tag = info.type_tag or TypeTag.EXTERNAL_DATABASE

    logger.debug(
        "Enriched {!r}: url={} desc={} type={}",
        result.name,
        bool(url),
        bool(info and info.description),
        type_tag.value if type_tag else None,
    )
    return result.model_copy(update={"url": url, "description": description, "type_tag": type_tag})


def enrich_results(results: Sequence[RankedResult], index: CatalogIndex) -> List[RankedResult]:
    """Attach url, description and type to every result."""
    logger.info("Enriching {} results", len(results))
    return [enrich_result(r, index) for r in results]


def to_payload(result: RankedResult) -> Dict[str, Any]:
    """
    Convert a result into the JSON shape the search widget consumes:
    camelCase fields plus at most one ``is<Type>`` flag.
    """
    payload: Dict[str, Any] = {
        "name": result.name,
        "relevanceScore": result.relevance_score,
        "matchReason": result.match_reason,
    }
    if result.url:
        payload["url"] = result.url
    if result.description:
        payload["description"] = result.description
    if result.type_tag is not None:
        payload[TYPE_FLAGS[result.type_tag]] = True
    return payload


def to_payloads(results: Sequence[RankedResult]) -> List[Dict[str, Any]]:
    return [to_payload(r) for r in results]

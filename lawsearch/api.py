from __future__ import annotations

"""
FastAPI application for the law library resource recommender.

- Catalogs are loaded and indexed once in the startup hook
- Legal-advice queries get the referral list instead of a search
- The recommender is optional: without GEMINI_API_KEY searches run on
  local guides and assets only
- ``debug=1`` returns pipeline diagnostics next to the results;
  ``skipWhitelist=1`` bypasses whitelist validation for troubleshooting
- ``/wp-json/ais/v1/search`` is the same handler under the path the
  WordPress widget calls
- ``/test-ai`` and ``/models`` check the Gemini key and model access
"""

import hashlib
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .catalog_build import load_catalogs
from .config import (
    ALLOWED_ORIGINS,
    LOCAL_API_KEY,
    LOG_DIR,
    LOG_QUERY_CHARS,
    MODEL,
    SEARCH_LOG_PATH,
    SHORTLIST_CAP,
    HealthResponse,
    LegalCheckResponse,
)
from .errors import RecommenderUnavailable
from .legal_help import is_legal_advice_request, legal_help_results
from .mapping import to_payloads
from .normalize import normalize_name
from .pipeline import SearchContext, build_context, run_pipeline
from .recommender import GeminiRecommender

# =============================================================================
# Request logging
# =============================================================================

def _hash_client(host: str) -> str:
    return hashlib.md5(host.encode("utf-8")).hexdigest()[:8]


def log_search(request: Request, query: str, results: int, error: Optional[str] = None) -> None:
    """Write one search record; the client address is stored hashed."""
    host = request.client.host if request.client else "unknown"
    logger.bind(search_log=True).info(
        "search client={} query={!r} agent={!r} results={} error={}",
        _hash_client(host),
        (query or "")[:LOG_QUERY_CHARS],
        (request.headers.get("user-agent") or "unknown")[:100],
        results,
        error,
    )


# =============================================================================
# FastAPI app + startup
# =============================================================================

app = FastAPI(title="Law Library Resource Search")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)

_context: Optional[SearchContext] = None
_recommender: Optional[GeminiRecommender] = None
_search_sink_id: Optional[int] = None


@app.on_event("startup")
def startup_event() -> None:
    global _context, _recommender, _search_sink_id
    logger.info("Starting app warmup...")
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    if _search_sink_id is not None:
        logger.remove(_search_sink_id)
    _search_sink_id = logger.add(
        SEARCH_LOG_PATH,
        filter=lambda record: record["extra"].get("search_log", False),
        serialize=True,
        enqueue=True,
    )
    _context = build_context(load_catalogs())
    recommender = GeminiRecommender()
    if recommender.enabled:
        _recommender = recommender
    else:
        _recommender = None
        logger.warning("GEMINI_API_KEY missing; searches will use local catalogs only.")
    if not LOCAL_API_KEY:
        logger.warning("LOCAL_API_KEY not set; API authentication disabled.")
    logger.info("Warmup complete.")


@app.on_event("shutdown")
def shutdown_event() -> None:
    global _search_sink_id
    if _search_sink_id is not None:
        # flushes and joins the enqueue worker
        logger.remove(_search_sink_id)
        _search_sink_id = None


def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    if not LOCAL_API_KEY:
        return
    if x_api_key != LOCAL_API_KEY:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def _require_context() -> SearchContext:
    if _context is None:
        raise HTTPException(status_code=500, detail="Catalog not loaded")
    return _context


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    ctx = _require_context()
    return HealthResponse(
        ok=True,
        model=(_recommender.resolved_model if _recommender else None) or MODEL,
        allowlist_size=SHORTLIST_CAP,
        recommender_enabled=_recommender is not None,
        catalog_counts=ctx.catalog_counts,
        whitelist_size=len(ctx.whitelist),
        index_size=len(ctx.index),
        missing_sources=list(ctx.missing_sources),
    )


@app.get("/test-legal", response_model=LegalCheckResponse)
def test_legal(query: str = Query(..., min_length=1)) -> LegalCheckResponse:
    return LegalCheckResponse(
        query=query,
        normalized=normalize_name(query),
        is_legal_advice=is_legal_advice_request(query),
    )


@app.get("/search", dependencies=[Depends(require_api_key)])
@app.get("/wp-json/ais/v1/search", dependencies=[Depends(require_api_key)])
async def search(
    request: Request,
    query: str = Query(default=""),
    debug: int = Query(default=0, ge=0),
    skip_whitelist: int = Query(default=0, ge=0, alias="skipWhitelist"),
) -> Any:
    query = query.strip()
    if not query:
        log_search(request, query, 0, "Missing query parameter")
        raise HTTPException(status_code=400, detail="Missing ?query")
    ctx = _require_context()

    if is_legal_advice_request(query):
        logger.info("Returning legal help referrals for {!r}", query[:LOG_QUERY_CHARS])
        payload: List[Dict[str, Any]] = to_payloads(legal_help_results())
        log_search(request, query, len(payload))
        return payload

    if skip_whitelist:
        logger.warning("Whitelist validation skipped for {!r}", query[:LOG_QUERY_CHARS])
    outcome = await run_pipeline(query, ctx, _recommender, skip_whitelist=bool(skip_whitelist))
    payload = to_payloads(outcome.results)
    log_search(request, query, len(payload), outcome.recommender_error)

    if debug:
        diagnostics = outcome.diagnostics()
        diagnostics.update(
            {
                "queryType": "research",
                "model": MODEL,
                "recommenderEnabled": _recommender is not None,
                "catalogCounts": ctx.catalog_counts,
            }
        )
        return {"diagnostics": diagnostics, "results": payload}
    return payload


# =============================================================================
# Recommender diagnostics
# =============================================================================

def _require_recommender() -> GeminiRecommender:
    if _recommender is None:
        raise HTTPException(status_code=502, detail="GEMINI_API_KEY is not set")
    return _recommender


@app.get("/test-ai")
async def test_ai() -> Any:
    recommender = _require_recommender()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        text = await recommender.ping()
    except RecommenderUnavailable as e:
        logger.error("AI connectivity check failed: {}", e)
        return JSONResponse(status_code=502, content={"ok": False, "error": str(e), "timestamp": timestamp})
    return {"ok": True, "model": recommender.resolved_model, "response": text, "timestamp": timestamp}


@app.get("/models")
async def models() -> Any:
    recommender = _require_recommender()
    try:
        return await recommender.list_models()
    except RecommenderUnavailable as e:
        return JSONResponse(status_code=502, content={"error": str(e)})

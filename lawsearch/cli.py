# lawsearch/cli.py
"""
Batch runner for the law library resource recommender.
Runs every query in a CSV/XLSX file without starting the HTTP server.

- Loads and indexes catalogs once, then reuses the context for all queries
- De-duplicates identical queries (runs once, fans out)
- Writes a flat CSV with headers: Query, Name, RelevanceScore, Url
- ``--offline`` skips the AI recommender and ranks local catalogs only
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd
from loguru import logger

from lawsearch.catalog_build import load_catalogs
from lawsearch.config import DATA_DIR, RankedResult
from lawsearch.normalize import clean_query
from lawsearch.pipeline import Recommend, SearchContext, build_context, process
from lawsearch.recommender import GeminiRecommender


def load_queries(path: Path) -> List[str]:
    ext = path.suffix.lower()
    df = pd.read_excel(path) if ext in {".xlsx", ".xls"} else pd.read_csv(path)
    cols = {str(c).lower(): c for c in df.columns}
    qcol = cols.get("query")
    if not qcol:
        raise ValueError(f"Expected column 'Query' in {path}. Found: {list(df.columns)}")
    queries = df[qcol].fillna("").astype(str).map(clean_query)
    return [q for q in queries.tolist() if q]


def _dedup_preserve_order(seq: List[str]) -> List[str]:
    return list(dict.fromkeys(seq))


def write_results_csv(preds: Dict[str, List[RankedResult]], out_path: Path) -> int:
    """
    Write one row per (query, result) with columns
    Query, Name, RelevanceScore, Url.  Returns the row count.
    """
    rows: List[Tuple[str, str, int, str]] = []
    for q, results in preds.items():
        for r in results:
            rows.append((q, r.name, r.relevance_score, r.url or ""))
    df = pd.DataFrame(rows, columns=["Query", "Name", "RelevanceScore", "Url"])
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)
    return len(df)


async def run_batch(
    queries: List[str],
    context: SearchContext,
    recommend: Optional[Recommend],
) -> Dict[str, List[RankedResult]]:
    unique_queries = _dedup_preserve_order(queries)
    logger.info("Unique queries to evaluate: {}", len(unique_queries))

    unique_preds: Dict[str, List[RankedResult]] = {}
    for i, uq in enumerate(unique_queries, 1):
        unique_preds[uq] = await process(uq, context, recommend)
        if i % 10 == 0 or i == len(unique_queries):
            logger.info("Processed {}/{} unique queries", i, len(unique_queries))

    # Fan-out back to input order
    return {q: unique_preds.get(q, []) for q in queries}


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Run legal resource searches in batch.")
    ap.add_argument("--in", dest="inp", type=str, required=True, help="CSV/XLSX file with a Query column")
    ap.add_argument("--out", dest="out", type=str, default="artifacts/search_results.csv", help="output CSV")
    ap.add_argument("--data-dir", dest="data_dir", type=str, default=str(DATA_DIR), help="catalog directory")
    ap.add_argument("--offline", action="store_true", help="skip the AI recommender")
    args = ap.parse_args(argv)

    context = build_context(load_catalogs(Path(args.data_dir)))

    recommend: Optional[Recommend] = None
    if not args.offline:
        recommender = GeminiRecommender()
        if recommender.enabled:
            recommend = recommender
        else:
            logger.warning("GEMINI_API_KEY missing; running with local catalogs only.")

    inp = Path(args.inp)
    queries = load_queries(inp)
    logger.info("Loaded {} queries from {}", len(queries), inp)

    preds = asyncio.run(run_batch(queries, context, recommend))
    total_rows = write_results_csv(preds, Path(args.out))
    logger.info("Wrote {} rows to {}", total_rows, args.out)


if __name__ == "__main__":
    main()

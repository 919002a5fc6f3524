from __future__ import annotations

"""
Loading of the library's resource catalogs from JSON exports.

Three catalogs feed the recommender: curated local subject guides,
external research databases, and LibGuide asset records.  Each export
has drifted over time (``title`` vs ``name``, ``link`` vs ``url``,
asset records keyed by id instead of listed), so this module maps the
raw columns onto one schema, cleans text fields, and yields
:class:`~lawsearch.config.ResourceEntry` values tagged with the type of
the file they came from.

Missing, unreadable or empty files are not errors here: they log a
warning, contribute nothing, and are reported back through
:attr:`Catalogs.missing_sources` so startup can surface them.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from loguru import logger

from .config import (
    DATA_DIR,
    EXTERNAL_DATABASES_CATALOG,
    EXTERNAL_DATABASES_WHITELISTS,
    LIBGUIDE_ASSETS_CATALOG,
    LOCAL_GUIDES_CATALOG,
    LOCAL_GUIDES_WHITELIST,
    ResourceEntry,
    TypeTag,
)
from .normalize import basic_clean


# ---------------------------
# Column detection / standardisation
# ---------------------------

COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "name": ["name", "Name", "title", "Title", "resource", "Resource"],
    "url": ["url", "URL", "Url", "link", "Link", "href"],
    "description": ["description", "Description", "summary", "Summary", "desc"],
    "aliases": ["aliases", "Aliases", "alias", "alternate_names"],
    "subjects": ["subjects", "Subjects", "subject", "topics", "tags"],
}

CANONICAL_COLUMNS = ["name", "url", "description", "aliases", "subjects"]


def _standardise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename columns from a raw export to the canonical schema and make
    sure every canonical column exists.
    """
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            cand_lower = candidate.lower()
            if cand_lower in lower_to_original:
                col_map[lower_to_original[cand_lower]] = canon
                break

    df_std = df.rename(columns=col_map)
    for col in CANONICAL_COLUMNS:
        if col not in df_std.columns:
            df_std[col] = None

    if df_std["name"].isna().all():
        logger.warning("Catalog export has no usable name column; columns were {}", list(df.columns))

    return df_std


# ---------------------------
# Field parsing helpers
# ---------------------------

def parse_name_list(value) -> Tuple[str, ...]:
    """
    Coerce an alias/subject field into a tuple of cleaned strings.

    Accepts lists, tuples, a single string (split on ``;`` or ``|``) and
    missing values.  Order is kept and duplicates removed.
    """
    if value is None:
        return ()
    if isinstance(value, float) and pd.isna(value):
        return ()
    if isinstance(value, str):
        parts = [p for chunk in value.split("|") for p in chunk.split(";")]
    elif isinstance(value, (list, tuple, set)):
        parts = [str(v) for v in value if v is not None]
    else:
        parts = [str(value)]

    out: List[str] = []
    for p in parts:
        cleaned = basic_clean(p)
        if cleaned and cleaned not in out:
            out.append(cleaned)
    return tuple(out)


def _optional_text(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    cleaned = basic_clean(value)
    return cleaned or None


def entries_from_frame(df_raw: pd.DataFrame, type_tag: TypeTag) -> List[ResourceEntry]:
    """
    Main normalisation pipeline: raw frame in, tagged entries out.

    Rows without a name are dropped.  Subjects are folded into the
    alias list after the explicit aliases.
    """
    if df_raw.empty:
        return []

    df = _standardise_columns(df_raw.copy())
    df["name"] = df["name"].map(_optional_text)
    df = df[df["name"].notna()].reset_index(drop=True)

    entries: List[ResourceEntry] = []
    for row in df[CANONICAL_COLUMNS].itertuples(index=False):
        aliases = list(parse_name_list(row.aliases))
        for subject in parse_name_list(row.subjects):
            if subject not in aliases:
                aliases.append(subject)
        entries.append(
            ResourceEntry(
                name=row.name,
                aliases=tuple(aliases),
                url=_optional_text(row.url),
                description=_optional_text(row.description),
                type_tag=type_tag,
            )
        )
    return entries


# ---------------------------
# IO helpers
# ---------------------------

def _read_records(path: Path) -> Optional[pd.DataFrame]:
    """
    Read a JSON export that is either an array of records or an object
    keyed by record id.  Returns ``None`` when the file is missing,
    unreadable or shaped like neither.
    """
    if not path.exists():
        logger.warning("Missing catalog file: {}", path)
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Failed to load catalog {}: {}", path, e)
        return None

    if isinstance(raw, dict):
        records = [r for r in raw.values() if isinstance(r, dict)]
    elif isinstance(raw, list):
        records = [r for r in raw if isinstance(r, dict)]
    else:
        logger.warning("Catalog file is not an array or object of records: {}", path)
        return None

    if not records:
        logger.warning("Catalog file has 0 items: {}", path)
    return pd.DataFrame.from_records(records)


def load_catalog_file(path: Path, type_tag: TypeTag) -> List[ResourceEntry]:
    """Load one catalog export and tag every entry with ``type_tag``."""
    df = _read_records(path)
    if df is None:
        return []
    entries = entries_from_frame(df, type_tag)
    logger.info("Loaded {} {} entries from {}", len(entries), type_tag.value, path.name)
    return entries


@dataclass(frozen=True)
class Catalogs:
    """Everything read from disk at startup, grouped by source."""

    external: Tuple[ResourceEntry, ...] = ()
    local_guides: Tuple[ResourceEntry, ...] = ()
    local_assets: Tuple[ResourceEntry, ...] = ()
    guide_whitelist: Tuple[ResourceEntry, ...] = ()
    external_whitelist: Tuple[ResourceEntry, ...] = ()
    missing_sources: Tuple[str, ...] = field(default_factory=tuple)

    def counts(self) -> Dict[str, int]:
        return {
            "external": len(self.external),
            "local_guides": len(self.local_guides),
            "local_assets": len(self.local_assets),
            "guide_whitelist": len(self.guide_whitelist),
            "external_whitelist": len(self.external_whitelist),
        }


def _first_existing(data_dir: Path, names: Sequence[str]) -> Path:
    for name in names:
        candidate = data_dir / name
        if candidate.exists():
            return candidate
    return data_dir / names[0]


def load_catalogs(data_dir: Path = DATA_DIR) -> Catalogs:
    """
    Load all catalogs and whitelists under ``data_dir``.

    Whitelist entries carry the type of the catalog they shadow so they
    can stand in for it when merged.  Every empty or absent source is
    listed in ``missing_sources``.
    """
    logger.info("Loading catalogs from {}", data_dir)
    sources = {
        "local_guides": (data_dir / LOCAL_GUIDES_CATALOG, TypeTag.LOCAL_GUIDE),
        "external": (data_dir / EXTERNAL_DATABASES_CATALOG, TypeTag.EXTERNAL_DATABASE),
        "local_assets": (data_dir / LIBGUIDE_ASSETS_CATALOG, TypeTag.LIBGUIDE_ASSET),
        "guide_whitelist": (data_dir / LOCAL_GUIDES_WHITELIST, TypeTag.LOCAL_GUIDE),
        "external_whitelist": (
            _first_existing(data_dir, EXTERNAL_DATABASES_WHITELISTS),
            TypeTag.EXTERNAL_DATABASE,
        ),
    }

    loaded: Dict[str, Tuple[ResourceEntry, ...]] = {}
    missing: List[str] = []
    for key, (path, tag) in sources.items():
        entries = tuple(load_catalog_file(path, tag))
        if not entries:
            missing.append(path.name)
        loaded[key] = entries

    catalogs = Catalogs(missing_sources=tuple(missing), **loaded)
    logger.info("Catalog counts: {}", catalogs.counts())
    if missing:
        logger.warning("Empty or missing catalog sources: {}", missing)
    return catalogs

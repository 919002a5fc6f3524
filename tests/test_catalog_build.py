import json

import pandas as pd

from lawsearch.catalog_build import (
    entries_from_frame,
    load_catalog_file,
    load_catalogs,
    parse_name_list,
)
from lawsearch.config import TypeTag


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def test_parse_name_list_variants():
    assert parse_name_list("Contracts; Sales | UCC") == ("Contracts", "Sales", "UCC")
    assert parse_name_list(["A", "A", None, "B"]) == ("A", "B")
    assert parse_name_list(None) == ()
    assert parse_name_list(float("nan")) == ()


def test_entries_from_frame_maps_alternate_columns():
    df = pd.DataFrame(
        [
            {"Title": "Contract Law", "link": "guides/contracts", "summary": "<p>Contracts</p>", "subjects": "UCC"},
            {"Title": None, "link": "x"},
        ]
    )
    entries = entries_from_frame(df, TypeTag.LOCAL_GUIDE)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.name == "Contract Law"
    assert entry.url == "guides/contracts"
    assert entry.description == "Contracts"
    assert entry.aliases == ("UCC",)
    assert entry.type_tag is TypeTag.LOCAL_GUIDE


def test_load_catalog_file_accepts_object_keyed_by_id(tmp_path):
    path = tmp_path / "assets.json"
    _write(path, {"1": {"name": "Tax Checklist"}, "2": {"name": "Water Handbook", "aliases": ["water"]}})
    entries = load_catalog_file(path, TypeTag.LIBGUIDE_ASSET)
    assert [e.name for e in entries] == ["Tax Checklist", "Water Handbook"]
    assert all(e.type_tag is TypeTag.LIBGUIDE_ASSET for e in entries)


def test_load_catalog_file_missing_or_broken(tmp_path):
    assert load_catalog_file(tmp_path / "nope.json", TypeTag.EXTERNAL_DATABASE) == []
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_catalog_file(broken, TypeTag.EXTERNAL_DATABASE) == []


def test_load_catalogs_reports_missing_sources(tmp_path):
    _write(tmp_path / "resource-database.catalog.json", [{"name": "Westlaw", "url": "westlaw.com"}])
    _write(tmp_path / "library-resources-database.catalog.json", [])
    _write(tmp_path / "resources-database.whitelist.json", [{"name": "Westlaw"}, {"name": "Lexis+"}])

    catalogs = load_catalogs(tmp_path)

    assert [e.name for e in catalogs.external] == ["Westlaw"]
    assert catalogs.local_guides == ()
    assert [e.name for e in catalogs.external_whitelist] == ["Westlaw", "Lexis+"]
    assert "library-resources-database.catalog.json" in catalogs.missing_sources
    assert "libguide-assets.catalog.json" in catalogs.missing_sources
    assert "resources-database.whitelist.json" not in catalogs.missing_sources
    assert catalogs.counts()["external"] == 1

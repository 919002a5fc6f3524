import pytest

from lawsearch.catalog_index import build_index, contains_either_way, shares_long_token
from lawsearch.config import ResourceEntry, TypeTag


def test_local_guide_type_wins_regardless_of_order():
    external = ResourceEntry(name="Westlaw", url="https://westlaw.com", type_tag=TypeTag.EXTERNAL_DATABASE)
    guide = ResourceEntry(name="Westlaw", description="Guide text", type_tag=TypeTag.LOCAL_GUIDE)

    for sources in ([[external], [guide]], [[guide], [external]]):
        entry = build_index(sources).get_exact("westlaw")
        assert entry.type_tag is TypeTag.LOCAL_GUIDE
        assert entry.url == "https://westlaw.com"
        assert entry.description == "Guide text"


def test_first_non_empty_url_and_description_kept():
    a = ResourceEntry(name="HeinOnline", url="https://a.example", type_tag=TypeTag.EXTERNAL_DATABASE)
    b = ResourceEntry(name="Hein Online", url="https://b.example", description="B", type_tag=TypeTag.EXTERNAL_DATABASE)
    c = ResourceEntry(name="HEINONLINE", description="C", type_tag=TypeTag.EXTERNAL_DATABASE)

    entry = build_index([[a, c]]).get_exact("heinonline")
    assert entry.url == "https://a.example"
    assert entry.description == "C"
    assert entry.name == "HeinOnline"
    # different normalized key, separate entry
    assert build_index([[a, b]]).get_exact("hein online").url == "https://b.example"


def test_aliases_are_unioned():
    a = ResourceEntry(name="Westlaw", aliases=("WL",))
    b = ResourceEntry(name="Westlaw", aliases=("Westlaw Edge", "WL"))
    entry = build_index([[a], [b]]).get_exact("Westlaw")
    assert entry.aliases == ("WL", "Westlaw Edge")


def test_lookup_by_alias(external_entries):
    index = build_index([external_entries])
    assert index.lookup("Westlaw Edge™").name == "Westlaw"
    assert index.lookup("utah statutes").name == "Utah Code Annotated"


def test_lookup_fuzzy_containment_and_shared_token(external_entries):
    index = build_index([external_entries])
    assert index.lookup("Bloomberg Law Litigation").name == "Bloomberg Law"
    assert index.lookup("Arbitration").name == "Kluwer Arbitration"


def test_lookup_misses(external_entries):
    index = build_index([external_entries])
    assert index.lookup("zzz") is None
    assert index.lookup("") is None
    assert index.lookup("Quantum Physics") is None


def test_index_is_read_only(external_entries):
    index = build_index([external_entries])
    assert len(index) == len(external_entries)
    assert "westlaw" in index
    with pytest.raises(TypeError):
        index.by_name["new"] = external_entries[0]


def test_fuzzy_helpers():
    assert contains_either_way("westlaw", "westlaw edge")
    assert not contains_either_way("uk", "uk law")
    assert shares_long_token("water rights", "utah water")
    assert not shares_long_token("law", "law review")

from lawsearch.config import ResourceEntry
from lawsearch.retrieval import lexical_score, score_candidates, shortlist


def test_lexical_score_counts_tokens_and_substring_boost():
    assert lexical_score("water rights", "Water Rights Database") == 2 + 2
    assert lexical_score("utah water", "Water Rights Database", ["Utah water rights"]) == 2 + 2
    assert lexical_score("rights water", "Water Rights Database") == 2
    assert lexical_score("tax", "Westlaw") == 0


def test_lexical_score_empty_query_is_zero():
    assert lexical_score("", "Westlaw") == 0
    assert lexical_score("™ !!", "Westlaw") == 0


def test_score_candidates_sorted_best_first(external_entries):
    scored = score_candidates("utah water rights", external_entries)
    assert scored[0].name == "Water Rights Database"
    assert [c.score for c in scored] == sorted((c.score for c in scored), reverse=True)
    assert all(c.score > 0 for c in scored)


def test_shortlist_orders_by_overlap(external_entries):
    names = shortlist("utah water rights", external_entries, cap=60)
    assert names[0] == "Water Rights Database"
    assert "Utah Code Annotated" in names
    assert "HeinOnline" not in names


def test_shortlist_falls_back_to_alphabetical(external_entries):
    names = shortlist("quantum entanglement", external_entries, cap=3)
    assert names == ["Bloomberg Law", "HeinOnline", "Kluwer Arbitration"]


def test_shortlist_never_empty_for_non_empty_catalog(external_entries):
    for query in ["", "zzz", "westlaw", "a b c d e"]:
        assert shortlist(query, external_entries, cap=2)


def test_shortlist_respects_cap_and_dedupes():
    entries = [ResourceEntry(name=f"Law Review {i}") for i in range(10)]
    entries.append(ResourceEntry(name="law review 0"))
    names = shortlist("law review", entries, cap=5)
    assert len(names) == 5
    assert len({n.lower() for n in names}) == 5


def test_shortlist_zero_cap_or_empty_catalog():
    assert shortlist("westlaw", [], cap=10) == []
    assert shortlist("westlaw", [ResourceEntry(name="Westlaw")], cap=0) == []

from lawsearch.config import RankedResult, ResourceEntry
from lawsearch.whitelist import Whitelist, filter_guides, looks_like_guide, looks_like_platform


def _suggestion(name, score=80):
    return RankedResult(name=name, relevance_score=score, match_reason="")


def test_exact_and_alias_names_accepted(external_entries):
    wl = Whitelist(external_entries)
    assert wl.is_plausible("Westlaw")
    assert wl.is_plausible("WESTLAW EDGE™")
    assert wl.is_plausible("Hein")


def test_substring_drift_accepted(external_entries):
    wl = Whitelist(external_entries)
    assert wl.is_plausible("Bloomberg Law Litigation")
    assert wl.is_plausible("Kluwer")


def test_unrelated_name_rejected(external_entries):
    wl = Whitelist(external_entries)
    assert not wl.is_plausible("Quantum Physics Journal")
    assert not wl.is_plausible("law")
    assert not wl.is_plausible("")


def test_filter_drops_only_implausible(external_entries):
    wl = Whitelist(external_entries)
    kept = wl.filter([_suggestion("Westlaw"), _suggestion("Made Up Database Pro"), _suggestion("HeinOnline")])
    assert [s.name for s in kept] == ["Westlaw", "HeinOnline"]


def test_merge_first_display_name_wins_and_aliases_union():
    wl = Whitelist.merge(
        [ResourceEntry(name="Westlaw", aliases=("WL",))],
        [ResourceEntry(name="WESTLAW", aliases=("Westlaw Edge",)), ResourceEntry(name="Lexis+")],
    )
    assert len(wl) == 2
    westlaw = wl.entries[0]
    assert westlaw.name == "Westlaw"
    assert westlaw.aliases == ("WL", "Westlaw Edge")


def test_empty_whitelist_rejects_everything():
    wl = Whitelist.merge([], [])
    assert len(wl) == 0
    assert wl.filter([_suggestion("Westlaw")]) == []


def test_platform_and_guide_detection():
    assert looks_like_platform("HeinOnline")
    assert looks_like_platform("Oxford Handbooks Online")
    assert not looks_like_platform("Contract Law")

    assert looks_like_guide("Contract Law")
    assert looks_like_guide("Tax Research Guide")
    assert looks_like_guide("Legal History")
    assert not looks_like_guide("Utah Code Annotated")


def test_filter_guides_keeps_platforms():
    items = [
        _suggestion("Contract Law"),
        _suggestion("Bloomberg Law"),
        _suggestion("Tax Research Guide"),
        _suggestion("Utah Code Annotated"),
    ]
    assert [i.name for i in filter_guides(items)] == ["Bloomberg Law", "Utah Code Annotated"]

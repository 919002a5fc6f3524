import pytest

from lawsearch.normalize import basic_clean, clean_query, normalize_name, strip_html, token_set


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Westlaw Edge™", "westlaw edge"),
        ("  Lexis+  ", "lexis"),
        ("Law & Economics", "law and economics"),
        ("O’Connor’s Texas Rules", "o connor s texas rules"),
        ("Bloomberg Law—Litigation", "bloomberg law litigation"),
        ("U.S. Code @ GovInfo", "u s code govinfo"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


@pytest.mark.parametrize("raw", ["Westlaw Edge™", "A  &  B", "“Quoted” – dash", "already normal"])
def test_normalize_name_is_idempotent(raw):
    once = normalize_name(raw)
    assert normalize_name(once) == once


def test_token_set_deduplicates():
    assert token_set("Water water LAW") == {"water", "law"}


def test_strip_html_removes_tags():
    assert strip_html("<p>Case law <b>search</b> .</p>") == "Case law search."


def test_strip_html_passes_plain_text_through():
    assert strip_html("no markup") == "no markup"


def test_basic_clean_keeps_case():
    assert basic_clean("  <i>Westlaw</i>\n Edge ") == "Westlaw Edge"
    assert basic_clean(None) == ""


def test_clean_query_clamps_and_collapses():
    assert clean_query("  utah   water\trights ") == "utah water rights"
    assert len(clean_query("x" * 5000)) == 2000
    assert clean_query(None) == ""

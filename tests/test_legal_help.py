import pytest

from lawsearch.config import TypeTag
from lawsearch.legal_help import is_legal_advice_request, legal_help_results


@pytest.mark.parametrize(
    "query",
    [
        "Should I sue my landlord?",
        "will I win in court",
        "I need help with my divorce",
        "What are my chances at trial",
        "can you represent me in court",
        "I’m being evicted, what should I do if they change the locks",
        "help me with my case",
    ],
)
def test_personal_advice_detected(query):
    assert is_legal_advice_request(query)


@pytest.mark.parametrize(
    "query",
    [
        "utah water rights",
        "divorce law treatises",
        "securities regulation databases",
        "case law on adverse possession",
        "",
    ],
)
def test_research_queries_not_flagged(query):
    assert not is_legal_advice_request(query)


def test_referral_list():
    results = legal_help_results()
    assert [r.name for r in results][:2] == ["Utah Legal Services", "Utah State Bar Pro Bono Program"]
    assert all(r.type_tag is TypeTag.LEGAL_HELP for r in results)
    assert all(r.url and r.url.startswith("https://") for r in results)
    assert all(60 <= r.relevance_score <= 100 for r in results)

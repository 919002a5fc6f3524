from __future__ import annotations

"""
Detection of personal legal-advice requests and the referral list
returned for them.

The library can point people to research resources but cannot give
legal advice.  Queries such as "should I sue my landlord" or "will I
win in court" are answered with a fixed list of legal aid and referral
services instead of a resource search.
"""

import re
from typing import List

from .config import RankedResult, TypeTag

_ADVICE_PATTERNS = [
    # direct advice / recommendation requests
    r"(should i|what should i|would you recommend|what would you recommend|tell me what to do|"
    r"what's the right decision|what would a lawyer say)",
    # personal legal situations
    r"(i'm being|i think i'm|my child was|help me with my case|i need legal advice)",
    # representation
    r"(can you represent|can you file|can you notarize|represent me in court)",
    # outcome prediction
    r"(will i win|will i go to jail|will the judge|what are my chances|how much money will i get|"
    r"will i lose my house)",
    # legal action decisions
    r"(should i sue|can i sue|do i have a case|is it worth|should i file)",
    # safety situations
    r"(i'm being abused|i think i'm being stalked|what should i do if|is it safe to)",
]
_ADVICE_RE = re.compile("|".join(_ADVICE_PATTERNS), re.IGNORECASE)

_HELP_PHRASES = [
    "divorce help",
    "custody help",
    "legal help",
    "help with divorce",
    "help getting divorced",
    "i need help with my divorce",
    "i want a divorce",
    "help suing",
    "help getting a divorce",
    "i would like a divorce",
    "what's the best way to handle",
    "how can i get around",
    "what's the best way to hide",
    "can i get disability for",
]


def is_legal_advice_request(query: str) -> bool:
    """True when ``query`` asks for advice on a personal legal matter."""
    q = (query or "").lower().strip().replace("’", "'")
    if not q:
        return False
    if _ADVICE_RE.search(q):
        return True
    if any(p in q for p in _HELP_PHRASES):
        return True
    if "help" in q and any(k in q for k in ("divorce", "lawsuit", "suing")):
        return True
    if "i need" in q and "divorce" in q:
        return True
    if "how can i win" in q and ("case" in q or "court" in q):
        return True
    return "what should i do" in q and any(k in q for k in ("legal", "court", "lawsuit"))


def legal_help_results() -> List[RankedResult]:
    """Fixed referral list shown instead of search results."""
    entries = [
        (
            "Utah Legal Services",
            95,
            "Free legal aid for low-income individuals",
            "Provides free civil legal assistance to low-income Utahns in matters including housing, "
            "family law, public benefits, and more.",
            "https://www.utahlegalservices.org/",
        ),
        (
            "Utah State Bar Pro Bono Program",
            95,
            "Pro bono attorney referrals",
            "Connects individuals who cannot afford legal representation with volunteer attorneys "
            "willing to provide free legal services.",
            "https://www.utahbar.org/pro-bono/",
        ),
        (
            "Utah State Bar Lawyer Referral Services",
            90,
            "Paid attorney referral service",
            "Helps you find qualified attorneys for legal consultation and representation. "
            "Initial consultation fees may apply.",
            "https://www.utcourts.gov/en/legal-help/legal-help/finding-legal-help/legal-clinics.html",
        ),
        (
            "Timpanogos Legal Center",
            85,
            "Local legal clinic in Provo",
            "Provides legal services and clinics. Hours: Tuesdays from 5pm-8pm (by appointment only). "
            "Location: Health and Justice Building, 1st Floor, 151 S University Avenue, Provo, UT 84601",
            "https://www.timplegal.org/legal-services/clinics",
        ),
        (
            "BYU Community Legal Clinic",
            90,
            "BYU Law School clinic",
            "Student-supervised legal clinic providing free legal services. Hours: Thursdays 5pm-7pm "
            "(by appointment only). Email: communitylegalclinic@law.byu.edu, Phone: 801-297-7049. "
            "Location: 1060 E. Campus Dr. Provo, UT 84604",
            "https://law.byu.edu/explore/resources/centers-clinics/community-legal-clinic#1",
        ),
    ]
    return [
        RankedResult(
            name=name,
            relevance_score=score,
            match_reason=reason,
            description=description,
            url=url,
            type_tag=TypeTag.LEGAL_HELP,
        )
        for name, score, reason, description, url in entries
    ]

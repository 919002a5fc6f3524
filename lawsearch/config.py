"""
Configuration for the law library resource recommender.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.getenv("LAWSEARCH_DATA_DIR", str(PROJECT_ROOT / "data")))

LOCAL_GUIDES_CATALOG = "library-resources-database.catalog.json"
EXTERNAL_DATABASES_CATALOG = "resource-database.catalog.json"
LIBGUIDE_ASSETS_CATALOG = "libguide-assets.catalog.json"
LOCAL_GUIDES_WHITELIST = "library-resources-database.whitelist.json"
# Either spelling of the external whitelist has shipped; the first that exists wins.
EXTERNAL_DATABASES_WHITELISTS = (
    "resource-database.whitelist.json",
    "resources-database.whitelist.json",
)

LOG_DIR = PROJECT_ROOT / "logs"
SEARCH_LOG_PATH = LOG_DIR / "search.log"

# External recommender
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1"
MODEL = os.getenv("MODEL", "gemini-2.0-flash-lite")
MODEL_CANDIDATES: List[str] = [
    m
    for m in [
        os.getenv("MODEL"),
        "gemini-2.0-flash-lite",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
        "gemini-1.5-flash-8b",
    ]
    if m
]
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
GENERATION_TEMPERATURE = 0.3
GENERATION_TOP_K = 32
GENERATION_TOP_P = 0.9
RECOMMENDER_TIMEOUT = float(os.getenv("RECOMMENDER_TIMEOUT", "45"))
HTTP_CONNECT_TIMEOUT = 5.0

# HTTP surface
LOCAL_API_KEY = os.getenv("LOCAL_API_KEY", "")
ALLOWED_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()
]
LOG_QUERY_CHARS = 200

# Text processing
MAX_INPUT_CHARS = 2_000

# Shortlist / validation
SHORTLIST_CAP = int(os.getenv("ALLOWLIST_SIZE", "60"))
SUBSTRING_BOOST = 2  # whole query found inside name + aliases
FUZZY_MIN_LENGTH = 4

# Result policy
MIN_RELEVANCE_SCORE = 60
MAX_RESULTS = 8
RELEVANCE_MIN = 0
RELEVANCE_MAX = 100

# Local relevance scoring
NAME_MATCH_POINTS = 10
TOKEN_MATCH_POINTS = 2
MIN_TOKEN_LENGTH = 3
ALIAS_MATCH_POINTS = 5
SCORE_MULTIPLIER = 3
GENERAL_TOPIC_MAX_WORDS = 3

# Country/region qualifiers that mark a name as jurisdiction-specific
# ("Afghanistan Water Law" vs the general "Water Law").
JURISDICTION_QUALIFIERS: List[str] = [
    "afghanistan", "africa", "african", "argentina", "asia", "asian", "australia",
    "bosnia", "brazil", "canada", "canadian", "china", "chinese", "egypt", "england",
    "europe", "european", "european union", "france", "french", "germany", "german",
    "ghana", "india", "indian", "iran", "iraq", "ireland", "israel", "italy", "japan",
    "japanese", "kenya", "korea", "latin america", "mexico", "mexican", "middle east",
    "netherlands", "new zealand", "nigeria", "pakistan", "philippines", "russia",
    "russian", "saudi arabia", "scotland", "south africa", "spain", "spanish",
    "switzerland", "taiwan", "turkey", "uganda", "ukraine", "united kingdom", "uk",
    "uzbekistan", "vietnam",
    # U.S. qualifiers; "Utah Water Law" is a variant of "Water Law"
    "united states", "u s",
    "alabama", "alaska", "arizona", "arkansas", "california", "colorado", "connecticut",
    "delaware", "district of columbia", "florida", "georgia", "hawaii", "idaho", "illinois",
    "indiana", "iowa", "kansas", "kentucky", "louisiana", "maine", "maryland",
    "massachusetts", "michigan", "minnesota", "mississippi", "missouri", "montana",
    "nebraska", "nevada", "new hampshire", "new jersey", "new mexico", "new york",
    "north carolina", "north dakota", "ohio", "oklahoma", "oregon", "pennsylvania",
    "rhode island", "south carolina", "south dakota", "tennessee", "texas", "utah",
    "vermont", "virginia", "washington", "west virginia", "wisconsin", "wyoming",
]

# Enrichment
DESCRIPTION_MAX_CHARS = 400
DESCRIPTION_TRUNCATE_TO = 380
ELLIPSIS = "…"

# Platform / guide filter for recommender output
KNOWN_DATABASES: List[str] = [
    "HeinOnline", "Westlaw", "Lexis", "LexisNexis", "Bloomberg Law", "ProQuest",
    "JSTOR", "LegalTrac", "Index to Legal Periodicals", "Oxford Constitutional Law",
    "Max Planck Encyclopedia of Comparative Constitutional Law", "Kluwer Arbitration",
    "Wolters Kluwer", "VitalLaw", "vLex", "Making of Modern Law", "Foreign Law Guide",
    "LLMC Digital", "Dalloz", "Beck Online", "SSRN", "WorldTradeLaw.net",
    "Investor-State LawGuide", "Oxford Public International Law", "Oxford Law",
    "Oxford Handbooks Online", "Cambridge Core", "Elgaronline", "Brill",
    "Law Journal Library", "U.S. Congressional Documents", "Nexis Uni",
    "U.S. Supreme Court Records and Briefs", "Westlaw Edge", "Lexis+",
]
VENDOR_TOKENS: List[str] = [
    "hein", "westlaw", "lexis", "lexisnexis", "bloomberg", "proquest", "jstor", "legaltrac",
    "kluwer", "vitallaw", "wolters", "vlex", "brill", "elgar", "oxford", "cambridge", "beck",
    "dalloz", "llmc", "ssrn", "max planck", "iel", "encyclopedia", "encyclopaedia", "handbook",
    "index to legal periodicals", "making of modern law",
]
PLATFORM_WORDS: List[str] = ["encyclopedia", "encyclopaedia", "handbook", "database", "platform", "online"]
GUIDE_PHRASES: List[str] = ["subject guide", "guide", "how to", "howto", "overview", "resources"]
GUIDE_CATEGORY_PHRASES: List[str] = ["legal history", "foreign international law", "foreign and international law"]


# Pydantic schemas
class TypeTag(str, Enum):
    EXTERNAL_DATABASE = "ExternalDatabase"
    LOCAL_GUIDE = "LocalGuide"
    LIBGUIDE_ASSET = "LibGuideAsset"
    LEGAL_HELP = "LegalHelp"


# Higher wins when two sources describe the same normalized name.
TYPE_PRECEDENCE: Dict[TypeTag, int] = {
    TypeTag.LOCAL_GUIDE: 3,
    TypeTag.LIBGUIDE_ASSET: 2,
    TypeTag.EXTERNAL_DATABASE: 1,
    TypeTag.LEGAL_HELP: 0,
}

# Output flag name per type tag
TYPE_FLAGS: Dict[TypeTag, str] = {
    TypeTag.EXTERNAL_DATABASE: "isExternalDatabase",
    TypeTag.LOCAL_GUIDE: "isLocalGuide",
    TypeTag.LIBGUIDE_ASSET: "isLibGuideAsset",
    TypeTag.LEGAL_HELP: "isLegalHelp",
}


class ResourceEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    aliases: Tuple[str, ...] = ()
    url: Optional[str] = None
    description: Optional[str] = None
    type_tag: Optional[TypeTag] = None


class RankedResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    relevance_score: int = Field(alias="relevanceScore", ge=RELEVANCE_MIN, le=RELEVANCE_MAX)
    match_reason: str = Field(default="", alias="matchReason")
    type_tag: Optional[TypeTag] = None
    url: Optional[str] = None
    description: Optional[str] = None


class LocalScorerSettings(BaseModel):
    """Weights for one local relevance scorer instance."""

    model_config = ConfigDict(frozen=True)

    label: str
    type_tag: TypeTag
    base: int
    topic_boost: int
    ceiling: int
    limit: int = 5
    match_reason: str
    default_description: str = "{name}"


GUIDE_SCORER = LocalScorerSettings(
    label="local guides",
    type_tag=TypeTag.LOCAL_GUIDE,
    base=60,
    topic_boost=20,
    ceiling=98,
    limit=5,
    match_reason="BYU Law Library subject guide on this topic",
    default_description="Research guide for {name}",
)

ASSET_SCORER = LocalScorerSettings(
    label="LibGuide assets",
    type_tag=TypeTag.LIBGUIDE_ASSET,
    base=50,
    topic_boost=15,
    ceiling=90,
    limit=5,
    match_reason="LibGuide asset resource",
)


class HealthResponse(BaseModel):
    ok: bool
    model: str
    allowlist_size: int
    recommender_enabled: bool
    catalog_counts: Dict[str, int]
    whitelist_size: int
    index_size: int
    missing_sources: List[str]


class LegalCheckResponse(BaseModel):
    query: str
    normalized: str
    is_legal_advice: bool

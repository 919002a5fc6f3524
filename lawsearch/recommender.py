from __future__ import annotations

"""
Client for the external AI recommender (Google Gemini REST API).

:class:`GeminiRecommender` is an async callable with the signature the
pipeline expects from its ``recommend`` collaborator::

    suggestions = await recommender(query, candidate_names)

It builds a librarian prompt restricted to ``candidate_names``, posts it
to ``generateContent`` with ``httpx``, and parses the reply with a
tolerant JSON reader, since models regularly wrap output in code fences,
use single quotes, leave keys unquoted or get cut off mid-array.
Transport and HTTP failures raise :class:`~lawsearch.errors.RecommenderUnavailable`;
unparseable text yields an empty list rather than an error.
"""

import json
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from loguru import logger

from .config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GENERATION_TEMPERATURE,
    GENERATION_TOP_K,
    GENERATION_TOP_P,
    HTTP_CONNECT_TIMEOUT,
    MAX_OUTPUT_TOKENS,
    MODEL_CANDIDATES,
    RECOMMENDER_TIMEOUT,
    RELEVANCE_MAX,
    RELEVANCE_MIN,
    RankedResult,
)
from .errors import RecommenderUnavailable

PING_PROMPT = "Hello, respond with just 'OK' if you can hear me."


# ---------------------------
# Prompt
# ---------------------------

def build_prompt(user_query: str, allowed_names: Sequence[str]) -> str:
    allowed = ", ".join(allowed_names)
    return f"""
SYSTEM: You are an expert law librarian at BYU Law Library. Recommend ONLY from the allowed list below.

ALLOWED RESOURCES (choose strictly from these; do not invent new names):
{allowed}

TASK: Recommend 3-8 HIGHLY RELEVANT LEGAL RESEARCH RESOURCES that best match the user's query.
- Output ONLY valid JSON (no code fences): an array of objects with exactly:
  - name (string; MUST be exactly from the allowed list above)
  - relevanceScore (1-100; be conservative - only use 70+ for truly relevant resources)
  - matchReason (<=100 chars; why this resource helps answer the query)

QUALITY OVER QUANTITY:
- ONLY include resources that are genuinely helpful for the specific query
- Better to return 3 excellent matches than 12 mediocre ones
- For CASE LAW queries: Prioritize Westlaw, Lexis+, Google Scholar, court databases, legal research platforms
- For STATUTES/CODES: Focus on code databases, government resources, statutory collections
- For GEOGRAPHIC queries (e.g., "Utah law"): Prioritize resources with that jurisdiction's content
- For SUBJECT-SPECIFIC queries: Match to relevant practice area databases and specialized resources
- For ACADEMIC queries: Include law reviews, academic databases, scholarly resources
- REJECT resources clearly unrelated to the query
- VERIFY geographic relevance (e.g., Utah queries should not return Uzbekistan resources)
- If unsure about relevance, DON'T include it

User Query: {json.dumps(user_query)}
""".strip()


# ---------------------------
# Loose JSON parsing
# ---------------------------

_FENCE_START_RE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_FENCE_END_RE = re.compile(r"```$")
_UNQUOTED_KEY_RE = re.compile(r"(^|{|,)\s*([A-Za-z_][A-Za-z0-9_\-]*)\s*:", re.MULTILINE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_ESCAPED_QUOTE_PLACEHOLDER = "￰"


def _to_jsonish(text: str) -> str:
    s = str(text).strip()
    s = _FENCE_START_RE.sub("", s)
    s = _FENCE_END_RE.sub("", s).strip()
    s = s.replace("`", '"')
    s = s.replace("\\'", _ESCAPED_QUOTE_PLACEHOLDER)
    s = s.replace("'", '"')
    return s.replace(_ESCAPED_QUOTE_PLACEHOLDER, "\\'")


def _quote_keys(s: str) -> str:
    s = _UNQUOTED_KEY_RE.sub(lambda m: f'{m.group(1)} "{m.group(2)}":', s)
    return _TRAILING_COMMA_RE.sub(r"\1", s)


def _try_list(s: str) -> Optional[List[Any]]:
    try:
        parsed = json.loads(s)
    except ValueError:
        return None
    return parsed if isinstance(parsed, list) else None


def _salvage_objects(s: str) -> List[Any]:
    """Pull every complete top-level ``{...}`` out of a (possibly truncated) array."""
    open_idx = s.find("[")
    close_idx = s.rfind("]")
    body = s[open_idx + 1 : close_idx] if open_idx != -1 and close_idx > open_idx else s

    objs: List[Any] = []
    depth = 0
    in_str = False
    escaped = False
    start = -1
    for i, ch in enumerate(body):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                fragment = _quote_keys(body[start : i + 1])
                try:
                    objs.append(json.loads(fragment))
                except ValueError:
                    logger.debug("Skipping unparseable fragment: {}", fragment[:80])
                start = -1
    return objs


def parse_json_loose(text: str | None) -> List[Any]:
    """
    Best-effort parse of a JSON array from model output.

    Tries the cleaned text as-is, then the outermost ``[...]`` slice
    with keys quoted and trailing commas removed, then salvages each
    complete object.  Never raises; may return an empty list.
    """
    if not text:
        return []
    unfenced = _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", str(text).strip())).strip()
    direct = _try_list(unfenced)
    if direct is not None:
        return direct

    s0 = _to_jsonish(text)
    direct = _try_list(s0)
    if direct is not None:
        return direct

    start = s0.find("[")
    end = s0.rfind("]")
    sliced = s0[start : end + 1] if start != -1 and end > start else s0
    s = _quote_keys(sliced)
    arr = _try_list(s)
    if arr is not None:
        return arr

    return _salvage_objects(s)


_NAME_KEYS = ("name", "platform", "database", "provider", "title", "resource")
_SCORE_KEYS = ("relevanceScore", "score", "rank", "relevance")
_REASON_KEYS = ("matchReason", "why", "reason", "notes")


def _first_present(item: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for k in keys:
        v = item.get(k)
        if v is not None and v != "":
            return v
    return None


def _as_score(value: Any) -> int:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return RELEVANCE_MIN
    if not math.isfinite(score):
        return RELEVANCE_MIN
    return int(max(RELEVANCE_MIN, min(RELEVANCE_MAX, round(score))))


def coerce_suggestion(item: Any) -> Optional[RankedResult]:
    """
    Turn one parsed suggestion into a :class:`RankedResult`.

    Accepts mappings with any of the usual key spellings, or objects
    exposing ``name``/``relevance_score``/``match_reason``.  Returns
    ``None`` when no name can be found.
    """
    if isinstance(item, RankedResult):
        return item if item.name.strip() else None
    if isinstance(item, Mapping):
        name = _first_present(item, _NAME_KEYS)
        score = _first_present(item, _SCORE_KEYS)
        reason = _first_present(item, _REASON_KEYS)
    else:
        name = getattr(item, "name", None)
        score = getattr(item, "relevance_score", getattr(item, "relevanceScore", None))
        reason = getattr(item, "match_reason", getattr(item, "matchReason", None))
    name = str(name or "").strip()
    if not name:
        return None
    return RankedResult(
        name=name,
        relevance_score=_as_score(score),
        match_reason=str(reason or "").strip(),
    )


def coerce_suggestions(items: Sequence[Any]) -> List[RankedResult]:
    out: List[RankedResult] = []
    for item in items:
        coerced = coerce_suggestion(item)
        if coerced is not None:
            out.append(coerced)
    return out


# ---------------------------
# Gemini client
# ---------------------------

def _response_text(data: Mapping[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return "[]"
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, Mapping))


class GeminiRecommender:
    """
    Async recommender backed by the Gemini REST API.

    The working model is resolved lazily from ``model_candidates`` on
    first use and re-resolved once if a call returns 404.  Pass
    ``transport`` to route requests through an ``httpx`` mock transport.
    """

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        *,
        model_candidates: Sequence[str] = tuple(MODEL_CANDIDATES),
        api_base: str = GEMINI_API_BASE,
        timeout: float = RECOMMENDER_TIMEOUT,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_candidates = list(model_candidates)
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens
        self._transport = transport
        self._resolved_model: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def resolved_model(self) -> Optional[str]:
        return self._resolved_model

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=HTTP_CONNECT_TIMEOUT),
            transport=self._transport,
        )

    async def _first_working_model(self, client: httpx.AsyncClient) -> str:
        params = {"key": self.api_key}
        for m in self.model_candidates:
            r = await client.get(f"{self.api_base}/models/{m}", params=params)
            if r.status_code >= 400:
                continue
            methods = r.json().get("supportedGenerationMethods") or []
            if not methods or "generateContent" in methods:
                return m

        r = await client.get(f"{self.api_base}/models", params=params)
        if r.status_code < 400:
            models = r.json().get("models") or []
            usable = [m for m in models if "generateContent" in (m.get("supportedGenerationMethods") or [])]
            pick = usable[0] if usable else (models[0] if models else None)
            if pick and pick.get("name"):
                # listed names come back as "models/<id>"
                return str(pick["name"]).split("/", 1)[-1]
        raise RecommenderUnavailable("No working Gemini model found for this API key")

    async def _model(self, client: httpx.AsyncClient) -> str:
        if self._resolved_model is None:
            self._resolved_model = await self._first_working_model(client)
            logger.info("Resolved Gemini model {}", self._resolved_model)
        return self._resolved_model

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": GENERATION_TEMPERATURE,
                "topK": GENERATION_TOP_K,
                "topP": GENERATION_TOP_P,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    async def _generate(self, client: httpx.AsyncClient, prompt: str) -> str:
        payload = self._payload(prompt)
        model = await self._model(client)
        url = f"{self.api_base}/models/{model}:generateContent"
        resp = await client.post(url, params={"key": self.api_key}, json=payload)

        if resp.status_code == 404:
            logger.warning("Gemini model {} returned 404; re-resolving", model)
            self._resolved_model = None
            model = await self._model(client)
            url = f"{self.api_base}/models/{model}:generateContent"
            resp = await client.post(url, params={"key": self.api_key}, json=payload)

        if resp.status_code >= 400:
            raise RecommenderUnavailable(
                f"Gemini HTTP {resp.status_code}: {resp.text[:400]}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError:
            logger.warning("Gemini returned a non-JSON body")
            return "[]"
        return _response_text(data)

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the concatenated response text."""
        if not self.enabled:
            raise RecommenderUnavailable("GEMINI_API_KEY is not set")
        try:
            async with self._client() as client:
                return await self._generate(client, prompt)
        except httpx.TimeoutException as e:
            raise RecommenderUnavailable("AI request timed out - try a simpler query") from e
        except httpx.HTTPError as e:
            raise RecommenderUnavailable(f"Gemini transport error: {e}") from e

    async def list_models(self) -> Dict[str, Any]:
        """Raw ``ListModels`` response for the configured key."""
        if not self.enabled:
            raise RecommenderUnavailable("GEMINI_API_KEY is not set")
        try:
            async with self._client() as client:
                r = await client.get(f"{self.api_base}/models", params={"key": self.api_key})
        except httpx.HTTPError as e:
            raise RecommenderUnavailable(f"Gemini transport error: {e}") from e
        if r.status_code >= 400:
            raise RecommenderUnavailable(f"Gemini HTTP {r.status_code}: {r.text[:400]}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise RecommenderUnavailable("Gemini returned a non-JSON model list") from e

    async def ping(self) -> str:
        """One-line round trip used by the connectivity check."""
        text = await self.generate(PING_PROMPT)
        return text.strip() or "No response"

    async def __call__(self, query: str, candidate_names: Sequence[str]) -> List[RankedResult]:
        text = await self.generate(build_prompt(query, candidate_names))
        suggestions = coerce_suggestions(parse_json_loose(text))
        logger.info("Gemini returned {} chars, {} suggestions", len(text), len(suggestions))
        return suggestions

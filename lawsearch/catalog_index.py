from __future__ import annotations

"""
Merged lookup index over every catalog source.

The index is built once at startup and only read afterwards.  Entries
are keyed by normalized name; a secondary map sends each normalized
alias to the canonical key.  When several sources describe the same
name the merge rules are:

* type tag: highest ``TYPE_PRECEDENCE`` wins (curated local guides over
  LibGuide assets over external databases), regardless of order;
* url / description: the first non-empty value seen is kept;
* aliases: union across all contributing sources, first-seen order;
* display name: the first spelling seen.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from loguru import logger

from .config import FUZZY_MIN_LENGTH, TYPE_PRECEDENCE, ResourceEntry, TypeTag
from .normalize import normalize_name, tokens_of


def _precedence(tag: Optional[TypeTag]) -> int:
    if tag is None:
        return -1
    return TYPE_PRECEDENCE.get(tag, -1)


@dataclass
class _MergeSlot:
    name: str
    aliases: List[str]
    url: Optional[str] = None
    description: Optional[str] = None
    type_tag: Optional[TypeTag] = None

    def absorb(self, entry: ResourceEntry) -> None:
        if not self.url and entry.url and entry.url.strip():
            self.url = entry.url.strip()
        if not self.description and entry.description and entry.description.strip():
            self.description = entry.description.strip()
        if _precedence(entry.type_tag) > _precedence(self.type_tag):
            self.type_tag = entry.type_tag
        for alias in entry.aliases:
            if alias and alias not in self.aliases:
                self.aliases.append(alias)

    def freeze(self) -> ResourceEntry:
        return ResourceEntry(
            name=self.name,
            aliases=tuple(self.aliases),
            url=self.url,
            description=self.description,
            type_tag=self.type_tag,
        )


def shares_long_token(a: str, b: str, min_length: int = FUZZY_MIN_LENGTH) -> bool:
    """True when two normalized strings share a token of ``min_length``+ chars."""
    left = {t for t in tokens_of(a) if len(t) >= min_length}
    if not left:
        return False
    return any(t in left for t in tokens_of(b))


def contains_either_way(a: str, b: str, min_length: int = FUZZY_MIN_LENGTH) -> bool:
    """True when both strings are long enough and one contains the other."""
    if len(a) < min_length or len(b) < min_length:
        return False
    return a in b or b in a


class CatalogIndex:
    """Read-only view of the merged catalogs."""

    def __init__(self, by_name: Dict[str, ResourceEntry], alias_to_name: Dict[str, str]) -> None:
        self._by_name = MappingProxyType(dict(by_name))
        self._alias_to_name = MappingProxyType(dict(alias_to_name))

    @property
    def by_name(self) -> Mapping[str, ResourceEntry]:
        return self._by_name

    @property
    def alias_to_name(self) -> Mapping[str, str]:
        return self._alias_to_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._by_name

    def __iter__(self) -> Iterator[ResourceEntry]:
        return iter(self._by_name.values())

    def get_exact(self, name: str) -> Optional[ResourceEntry]:
        """Exact normalized-name or alias match, no fuzzy fallback."""
        key = normalize_name(name)
        if not key:
            return None
        if key in self._by_name:
            return self._by_name[key]
        canonical = self._alias_to_name.get(key)
        if canonical is not None:
            return self._by_name.get(canonical)
        return None

    def lookup(self, name: str) -> Optional[ResourceEntry]:
        """
        Resolve ``name`` to an entry.

        Tries the exact normalized name, then the alias map, then a
        linear fuzzy scan that accepts the first entry whose key either
        contains or is contained in the query (both at least
        ``FUZZY_MIN_LENGTH`` chars) or shares a token of that length.
        The fuzzy tier returns the first structural match in index
        order, not the closest one.
        """
        n = normalize_name(name)
        if not n:
            return None

        found = self.get_exact(n)
        if found is not None:
            logger.debug("Catalog direct match for {!r}", name)
            return found

        for key, entry in self._by_name.items():
            if contains_either_way(n, key):
                logger.debug("Catalog fuzzy match for {!r} -> {!r}", name, key)
                return entry
            if shares_long_token(key, n):
                logger.debug("Catalog word match for {!r} -> {!r}", name, key)
                return entry

        logger.debug("No catalog match for {!r} (normalized {!r})", name, n)
        return None


def build_index(sources: Sequence[Iterable[ResourceEntry]]) -> CatalogIndex:
    """
    Merge ``sources`` into one :class:`CatalogIndex`.

    Sources are consumed in the given order; that order only decides
    which url, description and display name are seen first, since type
    precedence is order independent.
    """
    slots: Dict[str, _MergeSlot] = {}
    alias_to_name: Dict[str, str] = {}

    for source in sources:
        for entry in source:
            key = normalize_name(entry.name)
            if not key:
                continue
            slot = slots.get(key)
            if slot is None:
                slot = _MergeSlot(name=entry.name, aliases=[])
                slots[key] = slot
            slot.absorb(entry)
            for alias in entry.aliases:
                alias_key = normalize_name(alias)
                if alias_key:
                    alias_to_name[alias_key] = key

    by_name = {key: slot.freeze() for key, slot in slots.items()}
    logger.info("Catalog index has {} entries and {} aliases", len(by_name), len(alias_to_name))
    return CatalogIndex(by_name, alias_to_name)

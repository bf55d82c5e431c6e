"""Header-to-field resolution strategies.

Each strategy answers one question: "does this row have a field for this
header?" and returns the value or :data:`MISSING`. :class:`HeaderResolver`
tries them in a fixed order; the first answer wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from statline.models.table import Row
from statline.resolve.headers import alnum_key, clean_header, to_camel_case


class _Missing:
    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class HeaderKey:
    """A displayed header in the three spellings strategies compare against."""

    raw: str
    clean: str
    normalized: str

    @classmethod
    def from_text(cls, header: str) -> "HeaderKey":
        clean = clean_header(header)
        return cls(raw=header, clean=clean, normalized=clean.lower())


class ResolverStrategy(Protocol):
    name: str

    def try_resolve(self, row: Row, header: HeaderKey) -> Any: ...


# Common header vocabulary for pages that ship no explicit mapping.
DIRECT_FIELDS: dict[str, str] = {
    "team": "team",
    "conference": "conference",
    "conf": "conf",
    "adjem": "adjEm",
    "rank": "rank",
    "teams": "teams",
    "avg rating": "avgRating",
    "top team": "topTeam",
    "win %": "Win%",
    "win%": "Win%",
    "w-l": "record",
    "sos": "sos",
    "ppg": "ppg",
    "fg%": "fgPct",
    "3p%": "threePct",
    "ft%": "ftPct",
    "oppg": "oppg",
    "def fg%": "defFgPct",
    "steals": "steals",
    "blocks": "blocks",
    "rpg": "rpg",
    "apg": "apg",
    "player": "player",
    "conf w-l": "confRecord",
    "streak": "streak",
    "2023": "year2023",
    "2022": "year2022",
    "2021": "year2021",
    "trend": "trend",
    "seed": "seed",
    "result": "result",
    "coach": "coach",
    "years": "years",
    "momentum": "momentum",
    "last 10": "last10",
    "description": "description",
    "status": "status",
    "feature": "feature",
}


class ExplicitMappingStrategy:
    """Page-configured header → key, when the key is present on the row."""

    name = "explicit_mapping"

    def __init__(self, mappings: Mapping[str, str]) -> None:
        self.mappings = mappings

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        key = self.mappings.get(header.clean)
        if key and key in row:
            value = row[key]
            return "" if value is None else value
        return MISSING


class DeclaredMappingStrategy:
    """A header the page maps at all is authoritative, even if the row lacks the key."""

    name = "declared_mapping"

    def __init__(self, mappings: Mapping[str, str]) -> None:
        self.mappings = mappings

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        for config_header, key in self.mappings.items():
            if config_header == header.clean:
                return row[key] if key in row else ""
        return MISSING


class DirectFieldStrategy:
    name = "direct_field"

    def __init__(self, table: Mapping[str, str] | None = None) -> None:
        self.table = DIRECT_FIELDS if table is None else table

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        key = self.table.get(header.normalized)
        if key is not None and key in row:
            return row[key]
        return MISSING


class CaseInsensitiveKeyStrategy:
    name = "case_insensitive_key"

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        for key in row:
            if key.lower() == header.normalized:
                return row[key]
        return MISSING


class CamelCaseStrategy:
    name = "camel_case"

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        key = to_camel_case(header.normalized)
        if key in row:
            return row[key]
        return MISSING


class AlphanumericStrategy:
    """Compare header and keys with everything but ``[a-z0-9]`` stripped."""

    name = "alphanumeric"

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        target = alnum_key(header.normalized)
        if not target:
            return MISSING
        for key in row:
            if alnum_key(key) == target:
                return row[key]
        return MISSING


class PartialMatchStrategy:
    name = "partial_match"

    def try_resolve(self, row: Row, header: HeaderKey) -> Any:
        target = header.normalized
        if not target:
            return MISSING
        for key in row:
            lowered = key.lower()
            if target in lowered or lowered in target:
                return row[key]
        return MISSING


__all__ = [
    "DIRECT_FIELDS",
    "MISSING",
    "AlphanumericStrategy",
    "CamelCaseStrategy",
    "CaseInsensitiveKeyStrategy",
    "DeclaredMappingStrategy",
    "DirectFieldStrategy",
    "ExplicitMappingStrategy",
    "HeaderKey",
    "PartialMatchStrategy",
    "ResolverStrategy",
]

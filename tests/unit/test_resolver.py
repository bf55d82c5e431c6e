from __future__ import annotations

import pytest

from statline.resolve import HeaderResolver
from statline.resolve.headers import alnum_key, clean_header, normalize_header, to_camel_case
from statline.resolve.strategies import (
    MISSING,
    AlphanumericStrategy,
    CamelCaseStrategy,
    CaseInsensitiveKeyStrategy,
    DeclaredMappingStrategy,
    DirectFieldStrategy,
    ExplicitMappingStrategy,
    HeaderKey,
    PartialMatchStrategy,
)


def test_clean_header_strips_sort_glyphs_and_whitespace():
    assert clean_header("Win% ↕") == "Win%"
    assert clean_header("  NPI Value ↓") == "NPI Value"
    assert normalize_header("Avg Rating ↑") == "avg rating"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("avg rating", "avgRating"),
        ("top team", "topTeam"),
        ("last 10", "last10"),
        ("def fg%", "defFg"),
    ],
)
def test_to_camel_case(text, expected):
    assert to_camel_case(text) == expected


def test_alnum_key_drops_punctuation():
    assert alnum_key("Win %") == "win"
    assert alnum_key("Conf W-L") == "confwl"


def test_explicit_mapping_keeps_present_null_values():
    strategy = ExplicitMappingStrategy({"Rating": "adj_rating"})
    key = HeaderKey.from_text("Rating ↕")

    assert strategy.try_resolve({"adj_rating": 12.5}, key) == 12.5
    assert strategy.try_resolve({"adj_rating": None}, key) == ""
    assert strategy.try_resolve({"other": 1}, key) is MISSING


def test_declared_mapping_is_authoritative_when_key_absent():
    strategy = DeclaredMappingStrategy({"Rating": "adj_rating"})

    assert strategy.try_resolve({"rating": 3}, HeaderKey.from_text("Rating")) == ""
    assert strategy.try_resolve({"rating": 3}, HeaderKey.from_text("rating")) is MISSING


def test_direct_field_table_covers_common_vocabulary():
    strategy = DirectFieldStrategy()

    assert strategy.try_resolve({"adjEm": 21.3}, HeaderKey.from_text("AdjEM")) == 21.3
    assert strategy.try_resolve({"Win%": 0.853}, HeaderKey.from_text("Win %")) == 0.853
    assert strategy.try_resolve({"record": "20-5"}, HeaderKey.from_text("W-L")) == "20-5"
    assert strategy.try_resolve({"team": "Duke"}, HeaderKey.from_text("Coach")) is MISSING


def test_case_camel_alnum_and_partial_strategies():
    assert CaseInsensitiveKeyStrategy().try_resolve({"NPI Value": 1}, HeaderKey.from_text("npi value")) == 1
    assert CamelCaseStrategy().try_resolve({"valueDiff": -2}, HeaderKey.from_text("Value Diff")) == -2
    assert AlphanumericStrategy().try_resolve({"Surp_Gone": 4}, HeaderKey.from_text("Surp Gone")) == 4
    assert PartialMatchStrategy().try_resolve({"Transfers In (total)": 7}, HeaderKey.from_text("Transfers In")) == 7


def test_empty_header_does_not_match_everything():
    key = HeaderKey.from_text("↕")

    assert AlphanumericStrategy().try_resolve({"team": "Duke"}, key) is MISSING
    assert PartialMatchStrategy().try_resolve({"team": "Duke"}, key) is MISSING


def test_column_mapping_beats_direct_table():
    resolver = HeaderResolver({"Team": "school"})
    row = {"team": "Short", "school": "Duke University"}

    assert resolver.explain(row, "Team ↕") == ("explicit_mapping", "Duke University")


def test_unmapped_header_falls_through_chain_in_order():
    resolver = HeaderResolver()
    row = {"Team": "Duke", "fgPct": 0.48, "overallRank": 3}

    assert resolver.explain(row, "Team")[0] == "case_insensitive_key"
    assert resolver.explain(row, "FG%") == ("direct_field", 0.48)
    assert resolver.explain(row, "Overall Rank") == ("camel_case", 3)


def test_resolution_miss_returns_empty_value():
    resolver = HeaderResolver()

    assert resolver.explain({"team": "Duke"}, "Coach") == (None, "")
    assert resolver.resolve_value({}, "Team") == ""

"""Conditional cell styling driven by a declarative per-page rule table.

Rules are keyed by page identity and column header. The defaults reproduce the
site's ranking page; any page can override them with ``styleRules`` in the
page map.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from statline.exceptions import ConfigError
from statline.formatting import is_negative, parse_accounting
from statline.models.page import PageConfig
from statline.models.table import PLAIN, CellStyle, Row
from statline.resolve.headers import normalize_header

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")


class _RuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True, frozen=True)


class OrdinalCodes(_RuleModel):
    """Short rank codes: one top code, then ``<prefix><digits>`` ordered by number."""

    top_code: str = "A"
    prefix: str = "C-"
    digits: int = Field(default=2, ge=1)

    def number(self, code: Any) -> int | None:
        text = "" if code is None else str(code).strip()
        if not text.startswith(self.prefix):
            return None
        suffix = text[len(self.prefix) :]
        if len(suffix) != self.digits or not suffix.isdigit():
            return None
        return int(suffix)

    def rank(self, code: Any) -> float:
        """Top code first, then ascending suffix; unrecognized codes sort last."""
        text = "" if code is None else str(code).strip()
        if text == self.top_code:
            return 0.0
        number = self.number(text)
        return math.inf if number is None else float(number)


class TierBand(_RuleModel):
    low: int
    high: int
    color: str

    def contains(self, number: int) -> bool:
        return self.low <= number <= self.high


class IdentityTiering(_RuleModel):
    """Color the identity column from a companion code field on the same row."""

    field: str = "Bid Type"
    codes: OrdinalCodes = Field(default_factory=OrdinalCodes)
    top_color: str = "#15803d"
    bands: tuple[TierBand, ...] = (
        TierBand(low=1, high=21, color="#2563eb"),
        TierBand(low=22, high=36, color="#d97706"),
    )
    font_weight: str = "bold"

    def style_for(self, code: Any) -> CellStyle:
        if code is not None and str(code).strip() == self.codes.top_code:
            return CellStyle(color=self.top_color, font_weight=self.font_weight)
        number = self.codes.number(code)
        if number is not None:
            for band in self.bands:
                if band.contains(number):
                    return CellStyle(color=band.color, font_weight=self.font_weight)
        return PLAIN


class GradientRule(_RuleModel):
    column: str
    negative_color: str = "#f8696b"
    neutral_color: str = "#ffffff"
    positive_color: str = "#5a8ac6"

    @field_validator("negative_color", "neutral_color", "positive_color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        if not _HEX_RE.fullmatch(value):
            raise ValueError(f"gradient colors must be #rrggbb, got {value!r}")
        return value if value.startswith("#") else f"#{value}"


class StyleRules(_RuleModel):
    negative_columns: tuple[str, ...] = ()
    negative_color: str = "#dc3545"
    identity_tiering: IdentityTiering | None = None
    gradient: GradientRule | None = None
    ordinal_columns: tuple[str, ...] = ()
    ordinal_codes: OrdinalCodes = Field(default_factory=OrdinalCodes)

    def is_negative_column(self, header: str) -> bool:
        target = normalize_header(header)
        return any(normalize_header(h) == target for h in self.negative_columns)

    def is_ordinal_column(self, header: str) -> bool:
        target = normalize_header(header)
        return any(normalize_header(h) == target for h in self.ordinal_columns)


RANKING_PAGE = "npi"

DEFAULT_STYLE_RULES: dict[str, StyleRules] = {
    RANKING_PAGE: StyleRules(
        identity_tiering=IdentityTiering(),
        gradient=GradientRule(column="Value Diff"),
        ordinal_columns=("Bid Type",),
    ),
    "current_season_rankings": StyleRules(
        negative_columns=("Value of Results", "Underlying"),
    ),
}


def rules_for_page(
    page_id: str,
    page: PageConfig | None = None,
    *,
    defaults: Mapping[str, StyleRules] | None = None,
) -> StyleRules:
    """Page-declared rules win over the shipped defaults."""
    if page is not None and page.style_rules is not None:
        try:
            return StyleRules.model_validate(page.style_rules)
        except ValidationError as exc:
            raise ConfigError(f"Invalid styleRules for page {page_id!r}: {exc}") from exc
    table = DEFAULT_STYLE_RULES if defaults is None else defaults
    return table.get(page_id, StyleRules())


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


def _rgb(color: str) -> tuple[int, int, int]:
    match = _HEX_RE.fullmatch(color)
    if match is None:
        raise ValueError(f"not a #rrggbb color: {color!r}")
    h = match.group(1)
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def blend(start: str, end: str, t: float) -> str:
    """Linear blend from ``start`` (t=0) to ``end`` (t=1)."""
    t = min(max(t, 0.0), 1.0)
    a, b = _rgb(start), _rgb(end)
    return "#" + "".join(f"{round(x + (y - x) * t):02x}" for x, y in zip(a, b))


# ---------------------------------------------------------------------------
# Styler
# ---------------------------------------------------------------------------


class ConditionalStyler:
    """Derive per-cell presentation hints from one page's rules.

    ``cell_style`` depends only on the cell and its own row; ``gradient_styles``
    is the one computation that looks at a whole column.
    """

    def __init__(self, rules: StyleRules, *, identity_column: int = 0) -> None:
        self.rules = rules
        self.identity_column = identity_column

    def cell_style(self, row: Row, column: int, header: str, text: str) -> CellStyle:
        style = PLAIN
        if self.rules.is_negative_column(header) and is_negative(text):
            style = style.merged(CellStyle(color=self.rules.negative_color))
        tiering = self.rules.identity_tiering
        if tiering is not None and column == self.identity_column:
            style = style.merged(tiering.style_for(row.get(tiering.field)))
        return style

    def gradient_column(self, headers: Sequence[str]) -> int | None:
        gradient = self.rules.gradient
        if gradient is None:
            return None
        target = normalize_header(gradient.column)
        for index, header in enumerate(headers):
            if normalize_header(header) == target:
                return index
        return None

    def gradient_styles(self, texts: Sequence[str]) -> list[CellStyle]:
        """Background per cell, scaled by the column's own observed min and max."""
        gradient = self.rules.gradient
        if gradient is None:
            return [PLAIN for _ in texts]

        values = [parse_accounting(text) for text in texts]
        numbers = [v for v in values if v is not None and math.isfinite(v)]
        low = min(numbers, default=0.0)
        high = max(numbers, default=0.0)

        styles: list[CellStyle] = []
        for value in values:
            if value is None or not math.isfinite(value):
                styles.append(PLAIN)
            elif value < 0 and low < 0:
                styles.append(CellStyle(background=blend(gradient.neutral_color, gradient.negative_color, value / low)))
            elif value > 0 and high > 0:
                styles.append(CellStyle(background=blend(gradient.neutral_color, gradient.positive_color, value / high)))
            else:
                styles.append(CellStyle(background=gradient.neutral_color))
        return styles


__all__ = [
    "DEFAULT_STYLE_RULES",
    "RANKING_PAGE",
    "ConditionalStyler",
    "GradientRule",
    "IdentityTiering",
    "OrdinalCodes",
    "StyleRules",
    "TierBand",
    "blend",
    "rules_for_page",
]

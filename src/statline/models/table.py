"""Rendered-table state: rows, cell hints, sort and filter state."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, TypeAlias

Row: TypeAlias = Mapping[str, Any]
Dataset: TypeAlias = Sequence[Row]

NEUTRAL_GLYPH = "↕"
ASC_GLYPH = "↑"
DESC_GLYPH = "↓"
SORT_GLYPHS = NEUTRAL_GLYPH + ASC_GLYPH + DESC_GLYPH

ALL_CATEGORIES = ""
NO_RESULTS_MESSAGE = "No matching results found"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def glyph(self) -> str:
        return ASC_GLYPH if self is SortDirection.ASC else DESC_GLYPH


@dataclass(frozen=True, slots=True)
class CellStyle:
    """Presentation hints for one cell. ``None`` means "leave as is"."""

    color: str | None = None
    font_weight: str | None = None
    background: str | None = None

    def merged(self, other: "CellStyle") -> "CellStyle":
        """Return a copy where non-empty hints of ``other`` win."""
        return CellStyle(
            color=other.color if other.color is not None else self.color,
            font_weight=other.font_weight if other.font_weight is not None else self.font_weight,
            background=other.background if other.background is not None else self.background,
        )


PLAIN = CellStyle()


@dataclass(slots=True)
class RenderedRow:
    """One rendered row; ``origin`` always indexes the row it was built from."""

    origin: int
    cells: list[str]
    styles: list[CellStyle] = field(default_factory=list)
    visible: bool = True
    stripe: str | None = None

    def style(self, column: int) -> CellStyle:
        return self.styles[column] if column < len(self.styles) else PLAIN


@dataclass(frozen=True, slots=True)
class SortState:
    """At most one active (column, direction) pair."""

    column: int | None = None
    direction: SortDirection | None = None

    def clicked(self, column: int) -> "SortState":
        if self.column == column and self.direction is SortDirection.ASC:
            return SortState(column=column, direction=SortDirection.DESC)
        return SortState(column=column, direction=SortDirection.ASC)

    def glyph(self, column: int) -> str:
        if self.column != column or self.direction is None:
            return NEUTRAL_GLYPH
        return self.direction.glyph


@dataclass(frozen=True, slots=True)
class FilterState:
    query: str = ""
    category: str = ALL_CATEGORIES

    @property
    def all_categories(self) -> bool:
        return self.category.strip().lower() in {ALL_CATEGORIES, "all"}

    def with_query(self, query: str) -> "FilterState":
        return replace(self, query=query)

    def with_category(self, category: str) -> "FilterState":
        return replace(self, category=category)


@dataclass(frozen=True, slots=True)
class FilterResult:
    visible_count: int
    total: int

    @property
    def no_results(self) -> bool:
        return self.visible_count == 0


__all__ = [
    "ALL_CATEGORIES",
    "ASC_GLYPH",
    "DESC_GLYPH",
    "NEUTRAL_GLYPH",
    "NO_RESULTS_MESSAGE",
    "PLAIN",
    "SORT_GLYPHS",
    "CellStyle",
    "Dataset",
    "FilterResult",
    "FilterState",
    "RenderedRow",
    "Row",
    "SortDirection",
    "SortState",
]

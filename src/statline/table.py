"""Row-indexed table: populate, filter and sort rendered rows.

Every :class:`~statline.models.table.RenderedRow` carries the index of the
dataset row it was built from. Filtering and sorting move and hide rendered
rows but never touch the dataset, so ``table.dataset[row.origin]`` is always
the source row.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable

from statline.exceptions import ColumnError
from statline.formatting import display_text, format_value, parse_accounting
from statline.logging import EngineLogger, NullLogger
from statline.models.page import DEFAULT_PROGRESS_FIELDS
from statline.models.table import (
    ALL_CATEGORIES,
    Dataset,
    FilterResult,
    FilterState,
    RenderedRow,
    Row,
    SortDirection,
    SortState,
)
from statline.resolve.headers import normalize_header
from statline.resolve.resolver import HeaderResolver
from statline.styling import ConditionalStyler, StyleRules

STRIPE_ODD = "#fff"
STRIPE_EVEN = "#e9ecef"
CATEGORY_FIELDS: tuple[str, ...] = ("conf", "conference", "Conf")

Comparator = Callable[[str, str], int]


def row_category(row: Row) -> str:
    """Category of a source row: first non-empty of ``conf``, ``conference``, ``Conf``."""
    for key in CATEGORY_FIELDS:
        value = row.get(key)
        if value:
            return display_text(value)
    return ""


def compare_text(a: str, b: str) -> int:
    """Case-insensitive comparison with a case-sensitive tie-break."""
    fa, fb = a.casefold(), b.casefold()
    return ((fa > fb) - (fa < fb)) or ((a > b) - (a < b))


def compare_numeric_or_text(a: str, b: str) -> int:
    a_num, b_num = parse_accounting(a), parse_accounting(b)
    if a_num is not None and b_num is not None:
        if a_num == b_num:
            return 0
        return -1 if a_num < b_num else 1
    return compare_text(a, b)


def ordinal_comparator(rank: Callable[[Any], float]) -> Comparator:
    def compare(a: str, b: str) -> int:
        ra, rb = rank(a), rank(b)
        if ra == rb:
            return 0
        return -1 if ra < rb else 1

    return compare


class RowIndexTable:
    """Rendered rows for one page, with search, category filter and column sort."""

    def __init__(
        self,
        headers: Sequence[str],
        *,
        resolver: HeaderResolver | None = None,
        styler: ConditionalStyler | None = None,
        identity_column: int = 0,
        page_id: str = "",
        logger: EngineLogger | None = None,
    ) -> None:
        self.headers: tuple[str, ...] = tuple(headers)
        if self.headers and not 0 <= identity_column < len(self.headers):
            raise ColumnError(f"identity column {identity_column} is outside {len(self.headers)} columns")
        self.resolver = resolver or HeaderResolver()
        self.styler = styler or ConditionalStyler(StyleRules(), identity_column=identity_column)
        self.identity_column = identity_column
        self.page_id = page_id
        self.logger = logger or NullLogger()

        self.dataset: Dataset = ()
        self.rows: list[RenderedRow] = []
        self.sort_state = SortState()
        self.filter_state = FilterState()

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------
    def populate(self, dataset: Dataset) -> None:
        """Render every dataset row in source order, replacing prior rows."""
        self.dataset = tuple(dataset)
        rows: list[RenderedRow] = []
        for origin, row in enumerate(self.dataset):
            cells: list[str] = []
            styles = []
            for column, header in enumerate(self.headers):
                text = display_text(format_value(self.resolver.resolve_value(row, header), header))
                cells.append(text)
                styles.append(self.styler.cell_style(row, column, header, text))
            rows.append(RenderedRow(origin=origin, cells=cells, styles=styles))

        gradient_column = self.styler.gradient_column(self.headers)
        if gradient_column is not None:
            column_texts = [r.cells[gradient_column] for r in rows]
            for rendered, hint in zip(rows, self.styler.gradient_styles(column_texts)):
                rendered.styles[gradient_column] = rendered.styles[gradient_column].merged(hint)

        self.rows = rows
        self.sort_state = SortState()
        self.filter_state = FilterState()
        self.restripe()
        self.logger.event(
            "table.populated",
            level=logging.DEBUG,
            data={"page_id": self.page_id, "row_count": len(rows), "column_count": len(self.headers)},
        )

    def restripe(self) -> None:
        """Alternate backgrounds by position among visible rows only."""
        visible_index = 0
        for rendered in self.rows:
            if not rendered.visible:
                rendered.stripe = None
                continue
            rendered.stripe = STRIPE_EVEN if visible_index % 2 == 1 else STRIPE_ODD
            visible_index += 1

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def source_row(self, rendered: RenderedRow) -> Row:
        return self.dataset[rendered.origin]

    def visible_rows(self) -> list[RenderedRow]:
        return [r for r in self.rows if r.visible]

    @property
    def visible_count(self) -> int:
        return sum(1 for r in self.rows if r.visible)

    @property
    def no_results(self) -> bool:
        return self.visible_count == 0

    def header_labels(self) -> list[str]:
        return [f"{header} {self.sort_state.glyph(i)}" for i, header in enumerate(self.headers)]

    def category_options(self) -> list[str]:
        return sorted({c for c in (row_category(row) for row in self.dataset) if c})

    def _check_column(self, column: int) -> None:
        if not 0 <= column < len(self.headers):
            raise ColumnError(f"column {column} is outside {len(self.headers)} columns")

    # ------------------------------------------------------------------
    # Filter
    # ------------------------------------------------------------------
    def filter(self, query: str = "", category: str = ALL_CATEGORIES) -> FilterResult:
        """Show rows whose identity text contains ``query`` and whose category matches.

        The category is read from the source row through ``origin``, never
        from rendered text.
        """
        state = FilterState(query=query or "", category=category or ALL_CATEGORIES)
        needle = state.query.lower()
        for rendered in self.rows:
            identity = rendered.cells[self.identity_column].lower() if rendered.cells else ""
            matches_query = needle in identity
            matches_category = state.all_categories or row_category(self.source_row(rendered)) == state.category
            rendered.visible = matches_query and matches_category

        self.filter_state = state
        self.restripe()
        result = FilterResult(visible_count=self.visible_count, total=len(self.rows))
        self.logger.event(
            "table.filtered",
            level=logging.DEBUG,
            data={"query": state.query, "category": state.category, "visible_count": result.visible_count},
        )
        return result

    # ------------------------------------------------------------------
    # Sort
    # ------------------------------------------------------------------
    def comparator_for(self, column: int) -> tuple[str, Comparator]:
        rules = self.styler.rules
        if rules.is_ordinal_column(self.headers[column]):
            return "ordinal", ordinal_comparator(rules.ordinal_codes.rank)
        return "numeric_or_text", compare_numeric_or_text

    def sort(self, column: int) -> SortState:
        """Sort visible rows by ``column``; a repeat click on the same column flips direction.

        Hidden rows keep their slots, so their relative order is untouched.
        """
        self._check_column(column)
        state = self.sort_state.clicked(column)
        name, compare = self.comparator_for(column)
        sign = 1 if state.direction is SortDirection.ASC else -1

        slots = [i for i, r in enumerate(self.rows) if r.visible]
        ordered = sorted(
            (self.rows[i] for i in slots),
            key=cmp_to_key(lambda a, b: sign * compare(a.cells[column], b.cells[column])),
        )
        for slot, rendered in zip(slots, ordered):
            self.rows[slot] = rendered

        self.sort_state = state
        self.restripe()
        self.logger.event(
            "table.sorted",
            level=logging.DEBUG,
            data={
                "column_index": column,
                "header": self.headers[column],
                "direction": state.direction.value if state.direction else "asc",
                "comparator": name,
            },
        )
        return state

    def sort_by_header(self, header: str) -> SortState:
        """Sort by header text (sort glyphs and case ignored)."""
        target = normalize_header(header)
        for index, candidate in enumerate(self.headers):
            if normalize_header(candidate) == target:
                return self.sort(index)
        raise ColumnError(f"no column named {header!r}")


# ---------------------------------------------------------------------------
# Progress summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProgressStat:
    field: str
    count: int
    total: int

    @property
    def percent(self) -> float:
        return self.count / self.total * 100 if self.total else 0.0

    @property
    def text(self) -> str:
        return f"{self.percent:.1f}%"


def _is_published(value: Any) -> bool:
    return value is True or value == "TRUE"


def progress_summary(dataset: Dataset, fields: Iterable[str] = DEFAULT_PROGRESS_FIELDS) -> dict[str, ProgressStat]:
    """Share of rows flagged ``true``/``"TRUE"`` per field; empty for an empty dataset."""
    total = len(dataset)
    if total == 0:
        return {}
    return {
        field: ProgressStat(field=field, count=sum(1 for row in dataset if _is_published(row.get(field))), total=total)
        for field in fields
    }


__all__ = [
    "CATEGORY_FIELDS",
    "STRIPE_EVEN",
    "STRIPE_ODD",
    "ProgressStat",
    "RowIndexTable",
    "compare_numeric_or_text",
    "compare_text",
    "ordinal_comparator",
    "progress_summary",
    "row_category",
]

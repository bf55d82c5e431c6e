"""Presentation of a populated table: HTML, XLSX and DataFrame output.

Nothing here decides what a cell says or which color it gets; it only writes
the texts and hints the table already computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Any, Sequence

import polars as pl
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from statline.models.table import NO_RESULTS_MESSAGE, CellStyle, RenderedRow
from statline.table import RowIndexTable

ORIGIN_COLUMN = "__origin__"
TABLE_ID = "statsTable"


def _css(style: CellStyle, stripe: str | None) -> str:
    parts: list[str] = []
    background = style.background or stripe
    if background:
        parts.append(f"background-color: {background}")
    if style.color:
        parts.append(f"color: {style.color}")
    if style.font_weight:
        parts.append(f"font-weight: {style.font_weight}")
    return "; ".join(parts)


def _attr(name: str, value: str) -> str:
    return f' {name}="{escape(value, quote=True)}"' if value else ""


def _render_row(rendered: RenderedRow) -> str:
    row_css = f"background-color: {rendered.stripe}" if rendered.stripe else ""
    if not rendered.visible:
        row_css = "display: none"
    cells = "".join(
        f"<td{_attr('style', _css(rendered.style(i), rendered.stripe))}>{escape(text)}</td>"
        for i, text in enumerate(rendered.cells)
    )
    return f'<tr data-origin="{rendered.origin}"{_attr("style", row_css)}>{cells}</tr>'


def render_html(table: RowIndexTable, *, table_id: str = TABLE_ID) -> str:
    """Return the table markup plus the empty-state message when nothing is visible."""
    heads: list[str] = []
    for index, label in enumerate(table.header_labels()):
        sort_attr = ""
        if table.sort_state.column == index and table.sort_state.direction is not None:
            sort_attr = f' data-sort="{table.sort_state.direction.value}"'
        heads.append(f'<th data-column="{index}"{sort_attr}>{escape(label)}</th>')

    body = "\n".join(_render_row(r) for r in table.rows)
    lines = [
        f'<table id="{escape(table_id, quote=True)}">',
        f"<thead><tr>{''.join(heads)}</tr></thead>",
        "<tbody>",
    ]
    if body:
        lines.append(body)
    lines.extend(["</tbody>", "</table>"])
    if table.no_results:
        lines.append(f'<div class="no-results">{escape(NO_RESULTS_MESSAGE)}</div>')
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# DataFrame
# ---------------------------------------------------------------------------


def _unique_names(headers: Sequence[str]) -> list[str]:
    seen: dict[str, int] = {}
    names: list[str] = []
    for header in headers:
        count = seen.get(header, 0)
        seen[header] = count + 1
        names.append(header if count == 0 else f"{header}_{count + 1}")
    return names


def to_frame(table: RowIndexTable) -> pl.DataFrame:
    """Visible rows in display order as strings, with their dataset index."""
    visible = table.visible_rows()
    data: dict[str, list[Any]] = {ORIGIN_COLUMN: [r.origin for r in visible]}
    for index, name in enumerate(_unique_names(table.headers)):
        data[name] = [r.cells[index] for r in visible]
    schema = {ORIGIN_COLUMN: pl.Int64, **{name: pl.Utf8 for name in data if name != ORIGIN_COLUMN}}
    return pl.DataFrame(data, schema=schema)


# ---------------------------------------------------------------------------
# Workbook
# ---------------------------------------------------------------------------


def _rgb(color: str) -> str:
    """``#abc``/``#aabbcc`` -> ``AABBCC`` for openpyxl."""
    h = color.lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    return h.upper()


@dataclass
class SheetWriter:
    """Worksheet writer that tracks its own row cursor."""

    worksheet: Worksheet
    row: int = 0

    def write_row(self, values: Sequence[Any]) -> int:
        self.worksheet.append(list(values))
        self.row += 1
        return self.row


def write_worksheet(table: RowIndexTable, worksheet: Worksheet) -> str:
    """Write header labels and visible rows; return the written A1 range."""
    writer = SheetWriter(worksheet)
    writer.write_row(list(table.headers))
    for cell in worksheet[writer.row]:
        cell.font = Font(bold=True)

    for rendered in table.visible_rows():
        row_index = writer.write_row(rendered.cells)
        for col, cell in enumerate(worksheet[row_index]):
            style = rendered.style(col)
            background = style.background or rendered.stripe
            if background:
                cell.fill = PatternFill(fill_type="solid", start_color=_rgb(background), end_color=_rgb(background))
            if style.color or style.font_weight:
                cell.font = Font(
                    color=_rgb(style.color) if style.color else None,
                    bold=style.font_weight == "bold",
                )

    if not table.headers:
        return ""
    return f"A1:{get_column_letter(len(table.headers))}{writer.row}"


def write_workbook(table: RowIndexTable, path: Path, *, sheet_title: str = "Table") -> Path:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title[:31] or "Table"
    write_worksheet(table, worksheet)
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    return path


__all__ = [
    "ORIGIN_COLUMN",
    "SheetWriter",
    "TABLE_ID",
    "render_html",
    "to_frame",
    "write_workbook",
    "write_worksheet",
]

from statline.models.page import DEFAULT_PROGRESS_FIELDS, PageConfig
from statline.models.table import (
    ALL_CATEGORIES,
    NO_RESULTS_MESSAGE,
    PLAIN,
    CellStyle,
    Dataset,
    FilterResult,
    FilterState,
    RenderedRow,
    Row,
    SortDirection,
    SortState,
)

__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_PROGRESS_FIELDS",
    "NO_RESULTS_MESSAGE",
    "PLAIN",
    "CellStyle",
    "Dataset",
    "FilterResult",
    "FilterState",
    "PageConfig",
    "RenderedRow",
    "Row",
    "SortDirection",
    "SortState",
]

"""Page-level facade over loader, resolver, styler and row-indexed table."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from statline.loader import DataLoader
from statline.logging import EngineLogger, NullLogger
from statline.models.page import PageConfig
from statline.models.table import Dataset, FilterResult, FilterState, SortState
from statline.resolve.resolver import HeaderResolver
from statline.styling import ConditionalStyler, StyleRules, rules_for_page
from statline.table import ProgressStat, RowIndexTable, progress_summary


class TableEngine:
    """One table page: its configuration, its dataset and the interactive table.

    The page identity is passed in explicitly; nothing below this class reads
    the location.
    """

    def __init__(
        self,
        page_id: str,
        page: PageConfig,
        loader: DataLoader,
        *,
        logger: EngineLogger | None = None,
        style_defaults: Mapping[str, StyleRules] | None = None,
    ) -> None:
        self.page_id = page_id
        self.page = page
        self.loader = loader
        self.logger = logger or loader.logger or NullLogger()
        self.rules = rules_for_page(page_id, page, defaults=style_defaults)
        self.table = RowIndexTable(
            page.columns,
            resolver=HeaderResolver(page.column_mappings),
            styler=ConditionalStyler(self.rules, identity_column=page.identity_column),
            identity_column=page.identity_column,
            page_id=page_id,
            logger=self.logger,
        )
        self.filter_state = FilterState()

    @classmethod
    def for_location(
        cls,
        loader: DataLoader,
        location: str,
        *,
        logger: EngineLogger | None = None,
    ) -> "TableEngine | None":
        """Run the page start-up sequence: page map, page config, dataset, first render."""
        logger = logger or loader.logger or NullLogger()
        pages = loader.load_page_config()
        page_id = loader.page_identity(location)
        page = pages.get(page_id)
        if page is None or not page.is_table_page:
            logger.event(
                "page.missing",
                level=logging.WARNING,
                message=f"No page config or data source found for {page_id!r}",
                data={"page_id": page_id, "location": location},
            )
            return None

        engine = cls(page_id, page, loader, logger=logger)
        engine.load()
        return engine

    def load(self) -> Dataset:
        dataset = self.loader.load_data(self.page.data_source or "")
        self.table.populate(dataset)
        self.filter_state = FilterState()
        return dataset

    @property
    def dataset(self) -> Dataset:
        return self.table.dataset

    @property
    def has_data(self) -> bool:
        return bool(self.table.dataset)

    def search(self, query: str) -> FilterResult:
        self.filter_state = self.filter_state.with_query(query or "")
        return self._apply_filter()

    def select_category(self, category: str) -> FilterResult:
        self.filter_state = self.filter_state.with_category(category or "")
        return self._apply_filter()

    def _apply_filter(self) -> FilterResult:
        return self.table.filter(self.filter_state.query, self.filter_state.category)

    def sort(self, column: int | str) -> SortState:
        if isinstance(column, str):
            return self.table.sort_by_header(column)
        return self.table.sort(column)

    def header_labels(self) -> list[str]:
        return self.table.header_labels()

    def category_options(self) -> list[str]:
        return self.table.category_options()

    def progress(self) -> dict[str, ProgressStat] | None:
        if not self.page.show_progress:
            return None
        return progress_summary(self.table.dataset, self.page.progress_fields)


__all__ = ["TableEngine"]

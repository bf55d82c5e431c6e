from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fixtures.log_capture import recording_logger
from fixtures.sample_site import NPI_PAGE, SAMPLE_KEY, sample_pages, write_site

from statline.engine import TableEngine
from statline.exceptions import ConfigError
from statline.loader import DataLoader
from statline.models.page import PageConfig
from statline.models.table import FilterState
from statline.settings import Settings
from statline.styling import StyleRules


def _loader(root: Path, **kwargs) -> DataLoader:
    return DataLoader(Settings(site_root=str(root), obfuscation_key=SAMPLE_KEY), **kwargs)


def test_for_location_runs_startup_sequence(tmp_path: Path):
    write_site(tmp_path, obfuscate=["npi"])
    logger, handler = recording_logger()

    engine = TableEngine.for_location(_loader(tmp_path, logger=logger), "/stats/npi.html")

    assert engine is not None
    assert engine.page_id == "npi"
    assert engine.has_data and len(engine.dataset) == 4
    assert engine.rules.identity_tiering is not None
    assert handler.events() == [
        "statline.page_config.loaded",
        "statline.dataset.loaded",
        "statline.table.populated",
    ]


@pytest.mark.parametrize("location", ["/index.html", "/", "/nowhere.html"])
def test_for_location_without_table_page_returns_none(tmp_path: Path, location: str):
    write_site(tmp_path)
    logger, handler = recording_logger()

    assert TableEngine.for_location(_loader(tmp_path, logger=logger), location) is None
    assert "statline.page.missing" in handler.events()


def test_search_and_category_combine(tmp_path: Path):
    write_site(tmp_path)
    engine = TableEngine.for_location(_loader(tmp_path), "npi.html")
    assert engine is not None

    engine.select_category("Big 12")
    result = engine.search("b")

    assert result.visible_count == 1
    assert [r.cells[0] for r in engine.table.visible_rows()] == ["Baylor"]

    result = engine.select_category("")
    assert result.visible_count == 2


def test_sort_accepts_index_or_header(tmp_path: Path):
    write_site(tmp_path)
    engine = TableEngine.for_location(_loader(tmp_path), "npi.html")
    assert engine is not None

    engine.sort("Value Diff")
    assert [r.cells[0] for r in engine.table.rows] == ["Duke", "Alabama", "Baylor", "Arizona"]

    state = engine.sort(3)
    assert state.direction.value == "desc"
    assert engine.header_labels()[3] == "Value Diff ↓"


def test_category_options_and_progress(tmp_path: Path):
    write_site(tmp_path)
    loader = _loader(tmp_path)

    schedule = TableEngine.for_location(loader, "schedule_tracker.html")
    npi = TableEngine.for_location(loader, "npi.html")
    assert schedule is not None and npi is not None

    assert schedule.category_options() == ["ACC", "Big 12", "Big Ten", "WCC"]
    progress = schedule.progress()
    assert progress is not None
    assert progress["Schedule Published?"].text == "50.0%"
    assert npi.progress() is None


def test_missing_dataset_renders_empty_table(tmp_path: Path):
    write_site(tmp_path, datasets={})
    engine = TableEngine.for_location(_loader(tmp_path), "npi.html")

    assert engine is not None
    assert not engine.has_data
    assert engine.table.no_results


def test_style_defaults_can_be_injected(tmp_path: Path):
    write_site(tmp_path)
    page = PageConfig.model_validate(NPI_PAGE)

    engine = TableEngine("npi", page, _loader(tmp_path), style_defaults={})

    assert engine.rules == StyleRules()


def test_invalid_style_rules_surface_as_config_error(tmp_path: Path):
    pages = sample_pages()
    pages["npi"] = {**pages["npi"], "styleRules": {"gradient": {"column": "Value Diff", "positiveColor": "blue"}}}
    write_site(tmp_path, pages=pages)

    with pytest.raises(ConfigError):
        TableEngine.for_location(_loader(tmp_path), "npi.html")


def test_out_of_range_identity_column_is_not_fatal(tmp_path: Path):
    pages = sample_pages()
    pages["npi"] = {**pages["npi"], "columns": ["Team"], "identityColumn": 3}
    write_site(tmp_path, pages=pages)
    logger, handler = recording_logger()

    assert TableEngine.for_location(_loader(tmp_path, logger=logger), "/npi.html") is None
    assert "statline.page.missing" in handler.events()


def test_page_config_rejects_identity_column_past_columns():
    with pytest.raises(ValidationError):
        PageConfig.model_validate({"dataSource": "npi", "columns": ["Team"], "identityColumn": 1})

    assert PageConfig.model_validate({"dataSource": "npi", "identityColumn": 2}).identity_column == 2


def test_filter_state_tracks_query_and_category(tmp_path: Path):
    write_site(tmp_path)
    engine = TableEngine.for_location(_loader(tmp_path), "npi.html")
    assert engine is not None

    engine.search("a")
    engine.select_category("Big 12")
    assert engine.filter_state == FilterState(query="a", category="Big 12")
    assert engine.table.filter_state == engine.filter_state

    engine.load()
    assert engine.filter_state == FilterState()
    assert engine.table.visible_count == 4

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from fixtures.log_capture import recording_logger

from statline.logging import NullLogger, create_logger_context, qualify_event_name


def test_qualify_event_name():
    assert qualify_event_name("dataset.loaded", "statline") == "statline.dataset.loaded"
    assert qualify_event_name("statline.table.sorted", "statline") == "statline.table.sorted"
    assert qualify_event_name("", "statline") == "statline.invalid_event"


def test_event_stamps_ids_and_validates_payload():
    logger, handler = recording_logger()

    logger.event("dataset.loaded", data={"data_source": "npi", "row_count": 3, "obfuscated": False})

    record = handler.records[0]
    assert record.event == "statline.dataset.loaded"
    assert record.session_id == logger.session_id
    assert record.event_id
    assert record.data == {"schema_version": 1, "data_source": "npi", "row_count": 3, "obfuscated": False}


def test_engine_events_reject_bad_payloads_and_unknown_names():
    logger, _handler = recording_logger()

    with pytest.raises(ValueError):
        logger.event("dataset.loaded", data={"data_source": "npi", "row_count": "3", "obfuscated": False})
    with pytest.raises(ValueError):
        logger.event("table.sorted", data={"column_index": 0, "header": "Team", "direction": "up", "comparator": "x"})
    with pytest.raises(ValueError):
        logger.event("dataset.exploded")


def test_plain_log_lines_get_default_event():
    logger, handler = recording_logger()

    logger.info("hello %s", "world")

    assert handler.records[0].event == "statline.log"
    assert handler.records[0].getMessage() == "hello world"


def test_null_logger_is_silent_and_falsy():
    logger = NullLogger()

    logger.event("dataset.exploded")
    logger.error("ignored")

    assert not logger


def test_ndjson_log_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "run.ndjson"

    with create_logger_context(log_format="ndjson", log_level=logging.DEBUG, enable_console_logging=False, log_file=log_file) as ctx:
        ctx.logger.event(
            "table.filtered",
            level=logging.DEBUG,
            data={"query": "duke", "category": "", "visible_count": 1},
        )

    line = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
    assert line["event"] == "statline.table.filtered"
    assert line["level"] == "debug"
    assert line["data"]["visible_count"] == 1
    assert line["session_id"] == ctx.logger.session_id


def test_text_format_and_level_threshold(tmp_path: Path):
    log_file = tmp_path / "run.log"

    with create_logger_context(log_format="text", log_level=logging.WARNING, enable_console_logging=False, log_file=log_file) as ctx:
        ctx.logger.event("table.filtered", data={"query": "", "category": "", "visible_count": 0})
        ctx.logger.event("page.missing", level=logging.WARNING, message="No page", data={"page_id": "x"})

    text = log_file.read_text(encoding="utf-8")
    assert "table.filtered" not in text
    assert "WARNING statline.page.missing: No page (page_id=x)" in text


def test_unknown_log_format_is_rejected():
    with pytest.raises(ValueError):
        create_logger_context(log_format="xml", enable_console_logging=False)


def test_each_record_gets_its_own_event_id():
    logger, handler = recording_logger()

    logger.info("first", extra={"event_id": "fixed"})
    logger.info("second")

    first, second = handler.records
    assert first.event_id != "fixed"
    assert first.event_id != second.event_id


def test_event_payload_comes_only_from_data():
    logger, _handler = recording_logger()

    with pytest.raises(TypeError):
        logger.event("table.filtered", query="x")  # type: ignore[call-arg]

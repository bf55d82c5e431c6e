from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from statline.codec import encode_payload

SAMPLE_KEY = "test-key"

NPI_ROWS: list[dict[str, Any]] = [
    {"Team": "Duke", "Bid Type": "C-05", "NPI Value": 0.61234, "Value Diff": -10, "conf": "ACC"},
    {"Team": "Alabama", "Bid Type": "A", "NPI Value": 0.7, "Value Diff": 0, "conf": "SEC"},
    {"Team": "Arizona", "Bid Type": "C-25", "NPI Value": 0.55, "Value Diff": 20, "conf": "Big 12"},
    {"Team": "Baylor", "Bid Type": "", "NPI Value": 0.5, "Value Diff": 5, "conf": "Big 12"},
]

NPI_PAGE: dict[str, Any] = {
    "title": "NPI Rankings",
    "dataSource": "npi",
    "columns": ["Team", "Bid Type", "NPI Value", "Value Diff"],
    "hasSearch": True,
}

SCHEDULE_ROWS: list[dict[str, Any]] = [
    {"team": "Duke", "conference": "ACC", "Schedule Published?": True, "Roster Published?": "TRUE"},
    {"team": "Kansas", "conference": "Big 12", "Schedule Published?": False, "Roster Published?": "TRUE"},
    {"team": "Purdue", "conference": "Big Ten", "Schedule Published?": "TRUE", "Roster Published?": "FALSE"},
    {"team": "Gonzaga", "conference": "WCC", "Schedule Published?": None, "Roster Published?": False},
]

SCHEDULE_PAGE: dict[str, Any] = {
    "title": "Schedule Tracker",
    "dataSource": "schedule_tracker",
    "columns": ["Team", "Conference"],
    "showProgress": True,
}


def sample_pages() -> dict[str, Any]:
    return {
        "_featureFlags": {"npi": True, "transfers": False},
        "_nav": ["index", "npi"],
        "index": {"title": "Home"},
        "npi": NPI_PAGE,
        "schedule_tracker": SCHEDULE_PAGE,
    }


def write_site(
    root: Path,
    *,
    pages: Mapping[str, Any] | None = None,
    datasets: Mapping[str, Any] | None = None,
    obfuscate: Iterable[str] = (),
    key: str = SAMPLE_KEY,
) -> Path:
    """Lay out ``config/pages.json`` and ``data/<name>.json`` under ``root``."""
    encoded = set(obfuscate)
    (root / "config").mkdir(parents=True, exist_ok=True)
    (root / "data").mkdir(parents=True, exist_ok=True)

    page_map = sample_pages() if pages is None else pages
    (root / "config" / "pages.json").write_text(json.dumps(page_map), encoding="utf-8")

    payloads = {"npi": NPI_ROWS, "schedule_tracker": SCHEDULE_ROWS} if datasets is None else datasets
    for name, rows in payloads.items():
        path = root / "data" / f"{name}.json"
        if name in encoded:
            path.write_bytes(encode_payload(rows, key))
        else:
            path.write_text(json.dumps(rows), encoding="utf-8")
    return root

"""Dataset and page-map loading.

Both loaders fail soft: a fetch, decode or shape problem is logged and turns
into an empty result instead of an exception.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError

from statline.codec import decode_payload, is_obfuscated
from statline.exceptions import DataLoadError
from statline.logging import EngineLogger, NullLogger
from statline.models.page import PageConfig
from statline.models.table import Dataset, Row
from statline.settings import Settings

FEATURE_FLAGS_KEY = "_featureFlags"


class DatasetCache:
    """Datasets keyed by data-source name; each key is written once."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Row, ...]] = {}

    def get(self, name: str) -> tuple[Row, ...] | None:
        return self._entries.get(name)

    def put(self, name: str, rows: tuple[Row, ...]) -> tuple[Row, ...]:
        if name in self._entries:
            raise KeyError(f"Dataset {name!r} is already cached")
        self._entries[name] = rows
        return rows

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _freeze_rows(payload: Any, *, source: str) -> tuple[Row, ...]:
    if not isinstance(payload, list):
        raise DataLoadError(f"expected a JSON array, got {type(payload).__name__}", source=source)
    rows: list[Row] = []
    for index, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise DataLoadError(f"row {index} is not an object", source=source)
        rows.append(MappingProxyType(dict(item)))
    return tuple(rows)


class DataLoader:
    """Fetch the page map and datasets from a site root (directory or http base URL)."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        cache: DatasetCache | None = None,
        client: httpx.Client | None = None,
        logger: EngineLogger | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.cache = cache if cache is not None else DatasetCache()
        self.logger = logger or NullLogger()
        self._client = client
        self._owns_client = False
        self._pages: dict[str, PageConfig] | None = None
        self._feature_flags: dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True, timeout=self.settings.request_timeout)
            self._owns_client = True
        return self._client

    def _read(self, relative: str) -> bytes:
        if self.settings.is_remote:
            url = f"{self.settings.site_root.rstrip('/')}/{relative.lstrip('/')}"
            try:
                response = self._http().get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                raise DataLoadError(f"HTTP {status}: {exc.response.reason_phrase}", source=url) from exc
            except httpx.HTTPError as exc:
                raise DataLoadError(f"request failed: {exc}", source=url) from exc
            return response.content

        path = Path(self.settings.site_root).expanduser() / relative
        try:
            return path.read_bytes()
        except OSError as exc:
            raise DataLoadError(f"cannot read {path}: {exc.strerror or exc}", source=str(path)) from exc

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
            self._owns_client = False

    def __enter__(self) -> "DataLoader":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Page map
    # ------------------------------------------------------------------
    def load_page_config(self) -> dict[str, PageConfig]:
        """Load the page map once; an unreadable map is logged and treated as empty."""
        if self._pages is not None:
            return self._pages

        source = self.settings.pages_path
        try:
            payload = decode_payload(self._read(source), self.settings.obfuscation_key)
            if not isinstance(payload, Mapping):
                raise DataLoadError("page map must be a JSON object", source=source)
        except DataLoadError as exc:
            self.logger.event(
                "page_config.load_failed",
                level=logging.ERROR,
                message=f"Error loading page config: {exc}",
                data={"source": exc.source or source, "reason": str(exc)},
            )
            return {}

        pages: dict[str, PageConfig] = {}
        for key, entry in payload.items():
            if key.startswith("_"):
                if key == FEATURE_FLAGS_KEY and isinstance(entry, Mapping):
                    self._feature_flags = {str(k): v is True for k, v in entry.items()}
                continue
            try:
                pages[key] = PageConfig.model_validate(entry)
            except ValidationError as exc:
                self.logger.warning("Skipping invalid page %r: %s", key, exc)

        self._pages = pages
        self.logger.event(
            "page_config.loaded",
            data={"page_count": len(pages), "feature_flags": sorted(self._feature_flags)},
        )
        return pages

    def feature_flags(self) -> dict[str, bool]:
        self.load_page_config()
        return dict(self._feature_flags)

    def page_identity(self, location: str) -> str:
        """Final path segment of ``location`` without its extension; empty means home."""
        path = urlsplit(location or "").path
        segment = path[path.rfind("/") + 1 :]
        stem, dot, _ext = segment.rpartition(".")
        identity = stem if dot else segment
        return identity or self.settings.home_page

    def current_page_config(self, location: str) -> PageConfig | None:
        pages = self._pages if self._pages is not None else {}
        return pages.get(self.page_identity(location))

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------
    def load_data(self, name: str) -> Dataset:
        """Return the dataset for ``name``, fetching it at most once per cache."""
        cached = self.cache.get(name)
        if cached is not None:
            self.logger.event(
                "dataset.cache_hit",
                level=logging.DEBUG,
                data={"data_source": name, "row_count": len(cached)},
            )
            return cached

        source = f"{self.settings.data_dir.strip('/')}/{name}.json"
        try:
            raw = self._read(source)
            rows = _freeze_rows(decode_payload(raw, self.settings.obfuscation_key), source=source)
        except DataLoadError as exc:
            self.logger.event(
                "dataset.load_failed",
                level=logging.ERROR,
                message=f"Error loading data for {name}: {exc}",
                data={"source": exc.source or source, "reason": str(exc)},
            )
            return ()

        self.logger.event(
            "dataset.loaded",
            data={"data_source": name, "row_count": len(rows), "obfuscated": is_obfuscated(raw)},
        )
        return self.cache.put(name, rows)

    def clear_cache(self) -> None:
        self.cache.clear()
        self._pages = None
        self._feature_flags = {}


__all__ = ["DataLoader", "DatasetCache", "FEATURE_FLAGS_KEY"]

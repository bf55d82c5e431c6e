"""Event payload schemas and schema registry for statline logging.

Payload models are strict:
- ``extra="forbid"`` to prevent accidental schema drift
- runtime validation uses ``model_validate(..., strict=True)``
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

ENGINE_NAMESPACE = "statline"

DEFAULT_EVENT = "log"  # fallback event for plain log lines

PayloadModel: TypeAlias = type[BaseModel] | None

NonNegativeInt = Annotated[int, Field(ge=0)]


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StrictPayloadV1(StrictModel):
    schema_version: Literal[1] = 1


class DatasetLoadedPayloadV1(StrictPayloadV1):
    data_source: str
    row_count: NonNegativeInt
    obfuscated: bool


class DatasetCacheHitPayloadV1(StrictPayloadV1):
    data_source: str
    row_count: NonNegativeInt


class LoadFailedPayloadV1(StrictPayloadV1):
    source: str
    reason: str


class PageConfigLoadedPayloadV1(StrictPayloadV1):
    page_count: NonNegativeInt
    feature_flags: list[str]


class TablePopulatedPayloadV1(StrictPayloadV1):
    page_id: str
    row_count: NonNegativeInt
    column_count: NonNegativeInt


class TableFilteredPayloadV1(StrictPayloadV1):
    query: str
    category: str
    visible_count: NonNegativeInt


class TableSortedPayloadV1(StrictPayloadV1):
    column_index: NonNegativeInt
    header: str
    direction: Literal["asc", "desc"]
    comparator: str


ENGINE_EVENT_SCHEMAS: dict[str, PayloadModel] = {
    f"{ENGINE_NAMESPACE}.{DEFAULT_EVENT}": None,
    f"{ENGINE_NAMESPACE}.dataset.loaded": DatasetLoadedPayloadV1,
    f"{ENGINE_NAMESPACE}.dataset.cache_hit": DatasetCacheHitPayloadV1,
    f"{ENGINE_NAMESPACE}.dataset.load_failed": LoadFailedPayloadV1,
    f"{ENGINE_NAMESPACE}.page_config.loaded": PageConfigLoadedPayloadV1,
    f"{ENGINE_NAMESPACE}.page_config.load_failed": LoadFailedPayloadV1,
    f"{ENGINE_NAMESPACE}.page.missing": None,
    f"{ENGINE_NAMESPACE}.table.populated": TablePopulatedPayloadV1,
    f"{ENGINE_NAMESPACE}.table.filtered": TableFilteredPayloadV1,
    f"{ENGINE_NAMESPACE}.table.sorted": TableSortedPayloadV1,
}


__all__ = [
    "DEFAULT_EVENT",
    "ENGINE_EVENT_SCHEMAS",
    "ENGINE_NAMESPACE",
    "PayloadModel",
    "DatasetLoadedPayloadV1",
    "DatasetCacheHitPayloadV1",
    "LoadFailedPayloadV1",
    "PageConfigLoadedPayloadV1",
    "TablePopulatedPayloadV1",
    "TableFilteredPayloadV1",
    "TableSortedPayloadV1",
]

"""Page map models (``config/pages.json``)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PROGRESS_FIELDS: tuple[str, ...] = ("Schedule Published?", "Roster Published?")


class PageConfig(BaseModel):
    """One page entry of the page map.

    Keys are camelCase in the JSON file; unknown keys are kept so collaborators
    (page build, navigation) can read their own settings off the same object.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str | None = None
    heading: str | None = None
    description: str | None = None
    section_title: str | None = Field(default=None, alias="sectionTitle")
    data_source: str | None = Field(default=None, alias="dataSource")
    columns: list[str] = Field(default_factory=list)
    column_mappings: dict[str, str] = Field(default_factory=dict, alias="columnMappings")
    has_search: bool = Field(default=False, alias="hasSearch")
    search_placeholder: str | None = Field(default=None, alias="searchPlaceholder")
    show_progress: bool = Field(default=False, alias="showProgress")
    progress_fields: list[str] = Field(default_factory=lambda: list(DEFAULT_PROGRESS_FIELDS), alias="progressFields")
    feature_flag: str | None = Field(default=None, alias="featureFlag")
    legend: Any = None
    identity_column: int = Field(default=0, ge=0, alias="identityColumn")
    style_rules: dict[str, Any] | None = Field(default=None, alias="styleRules")

    @field_validator("columns", mode="before")
    @classmethod
    def _coerce_columns(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"columns must be a list of headers, got {type(value).__name__}")
        headers: list[str] = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("header") or item.get("label") or ""
            headers.append(str(item))
        return headers

    @field_validator("column_mappings", mode="before")
    @classmethod
    def _coerce_mappings(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError(f"columnMappings must be an object, got {type(value).__name__}")
        return {str(k): str(v) for k, v in value.items() if v is not None}

    @model_validator(mode="after")
    def _check_identity_column(self) -> "PageConfig":
        if self.columns and self.identity_column >= len(self.columns):
            raise ValueError(
                f"identityColumn {self.identity_column} is outside {len(self.columns)} columns"
            )
        return self

    @property
    def is_table_page(self) -> bool:
        return bool(self.data_source)


__all__ = ["DEFAULT_PROGRESS_FIELDS", "PageConfig"]

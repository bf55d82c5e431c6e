"""Settings for :mod:`statline`.

Settings are defined in one place (this file) and loaded using `pydantic-settings`.

Supported sources (lowest → highest precedence):
1) `settings.toml` (current working directory)
2) `.env` (current working directory)
3) environment variables (prefix: `STATLINE_`)
4) explicit overrides (`Settings(...)` / CLI)

`settings.toml` is intentionally flat: keys map 1:1 to `Settings` fields.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

ENV_PREFIX = "STATLINE_"
DEFAULT_OBFUSCATION_KEY = "statline"


def _coerce_log_level(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a log level name")

    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text:
        return logging.INFO

    if text.isdigit():
        return int(text)

    mapped = logging.getLevelNamesMapping().get(text.upper())
    if isinstance(mapped, int):
        return mapped

    raise ValueError(f"Invalid log_level: {value!r}")


class Settings(BaseSettings):
    """Runtime settings for the table engine."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_file=".env",
    )

    # Site layout
    site_root: str = Field(
        default=".",
        description="Directory or http(s) base URL that holds the page map and the data files.",
    )
    pages_path: str = Field(default="config/pages.json")
    data_dir: str = Field(default="data")
    home_page: str = Field(default="index", min_length=1)

    # Dataset decoding
    obfuscation_key: str = Field(default=DEFAULT_OBFUSCATION_KEY, min_length=1)

    # Network
    request_timeout: float = Field(default=10.0, gt=0)

    # Logging
    log_format: Literal["text", "ndjson"] = Field(default="text")
    log_level: int = Field(default=logging.INFO)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> int:
        return _coerce_log_level(value)

    @field_validator("site_root", mode="before")
    @classmethod
    def _validate_site_root(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "."

    @property
    def is_remote(self) -> bool:
        return self.site_root.lower().startswith(("http://", "https://"))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_files = None
        if hasattr(init_settings, "init_kwargs"):
            toml_files = init_settings.init_kwargs.get("_statline_toml_files")  # type: ignore[attr-defined]

        if toml_files is None:
            toml_files = [Path.cwd() / "settings.toml"]

        toml_settings = TomlConfigSettingsSource(settings_cls, toml_file=toml_files)

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            toml_settings,
            file_secret_settings,
        )

    @classmethod
    def load(cls, *, cwd: Path | None = None, **overrides: Any) -> "Settings":
        cwd_path = (cwd or Path.cwd()).expanduser().resolve()
        return cls(
            _statline_toml_files=[cwd_path / "settings.toml"],
            _env_file=cwd_path / ".env",
            **overrides,
        )


__all__ = ["DEFAULT_OBFUSCATION_KEY", "ENV_PREFIX", "Settings"]

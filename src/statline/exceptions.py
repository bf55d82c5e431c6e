"""Engine error hierarchy."""

from __future__ import annotations


class StatlineError(Exception):
    """Base class for statline exceptions."""


class ConfigError(StatlineError):
    """Raised when settings, page configuration or style rules are invalid."""


class DataLoadError(StatlineError):
    """Raised when a dataset or the page map cannot be fetched or parsed."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class CodecError(DataLoadError):
    """Raised when an obfuscated payload cannot be decoded."""


class ColumnError(StatlineError):
    """Raised when an operation addresses a column the table does not have."""


__all__ = [
    "StatlineError",
    "ConfigError",
    "DataLoadError",
    "CodecError",
    "ColumnError",
]

"""Shared helpers/options for the statline CLI.

Keep this module dependency-light; it should be safe to import from any CLI command module.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from typer import BadParameter

from statline.settings import Settings


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def resolve_log_level(log_level: Optional[str], default_level: int) -> int:
    """Resolve a string log level to a logging level constant."""
    if not log_level:
        return default_level

    mapping = logging.getLevelNamesMapping()
    resolved = mapping.get(str(log_level).upper())
    if isinstance(resolved, int):
        return resolved

    raise BadParameter(f"Invalid log level: {log_level}", param_hint="log_level")


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    debug: bool,
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Compute effective log format/level.

    Precedence: --quiet > --debug > --log-level > settings.
    """
    effective_format = log_format.value if log_format else settings.log_format
    base_level = resolve_log_level(log_level, settings.log_level)

    if quiet:
        effective_level = logging.WARNING
    elif debug:
        effective_level = logging.DEBUG
    else:
        effective_level = base_level

    return effective_format, effective_level


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def load_settings(site_root: Optional[str]) -> Settings:
    """Settings from env/toml with ``--site-root`` taking precedence."""
    if site_root:
        return Settings.load(site_root=site_root)
    return Settings.load()


def local_dataset_path(settings: Settings, name: str) -> Path:
    """Path of ``<data_dir>/<name>.json`` under a local site root."""
    if settings.is_remote:
        raise BadParameter("A local --site-root is required to rewrite dataset files.", param_hint="site_root")
    if not name or "/" in name or "\\" in name:
        raise BadParameter(f"Invalid dataset name: {name!r}", param_hint="name")

    path = Path(settings.site_root).expanduser() / settings.data_dir / f"{name}.json"
    if not path.is_file():
        raise BadParameter(f"Dataset file not found: {path}", param_hint="name")
    return path


# ---------------------------------------------------------------------------
# Common reusable Typer options
# ---------------------------------------------------------------------------

SITE_ROOT_OPTION = typer.Option(
    None,
    "--site-root",
    help="Site directory or http(s) base URL (or set STATLINE_SITE_ROOT / settings.toml).",
)

KEY_OPTION = typer.Option(
    None,
    "--key",
    help="Obfuscation key (defaults to STATLINE_OBFUSCATION_KEY / settings.toml).",
)

LOG_FORMAT_OPTION = typer.Option(
    None,
    "--log-format",
    case_sensitive=False,
    help="Log output format.",
)

LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    case_sensitive=False,
    help="Log level (debug, info, warning, error, critical).",
)

DEBUG_OPTION = typer.Option(
    False,
    "--debug",
    help="Enable debug logging (table events included).",
)

QUIET_OPTION = typer.Option(
    False,
    "--quiet",
    help="Reduce output to warnings and errors.",
)


__all__ = [
    "LogFormat",
    "load_settings",
    "local_dataset_path",
    "resolve_log_level",
    "resolve_logging",
    "SITE_ROOT_OPTION",
    "KEY_OPTION",
    "LOG_FORMAT_OPTION",
    "LOG_LEVEL_OPTION",
    "DEBUG_OPTION",
    "QUIET_OPTION",
]

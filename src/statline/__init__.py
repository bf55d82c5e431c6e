"""Public API for :mod:`statline`."""

from importlib import metadata
from pathlib import Path
from typing import TYPE_CHECKING
import tomllib

if TYPE_CHECKING:
    from statline.engine import TableEngine
    from statline.loader import DataLoader, DatasetCache
    from statline.models.page import PageConfig
    from statline.settings import Settings
    from statline.table import RowIndexTable


def _pyproject_version() -> str | None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        parsed = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        version = parsed.get("project", {}).get("version")
        if isinstance(version, str) and version:
            return version
    except (FileNotFoundError, OSError, tomllib.TOMLDecodeError):
        return None
    return None


def _resolve_version() -> str:
    # Prefer the local pyproject when running from a source checkout/editable install.
    version = _pyproject_version()
    if version is not None:
        return version

    try:
        return metadata.version("statline")
    except metadata.PackageNotFoundError:  # pragma: no cover
        return "unknown"


__version__ = _resolve_version()

_EXPORTS = {
    "TableEngine": ("statline.engine", "TableEngine"),
    "DataLoader": ("statline.loader", "DataLoader"),
    "DatasetCache": ("statline.loader", "DatasetCache"),
    "PageConfig": ("statline.models.page", "PageConfig"),
    "Settings": ("statline.settings", "Settings"),
    "RowIndexTable": ("statline.table", "RowIndexTable"),
}


def __getattr__(name: str):
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = __import__(module_name, fromlist=[attr_name])
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))


__all__ = [
    "DataLoader",
    "DatasetCache",
    "PageConfig",
    "RowIndexTable",
    "Settings",
    "TableEngine",
    "__version__",
]

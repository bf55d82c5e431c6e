"""CLI entrypoint for :mod:`statline`.

Exposes the statline CLI with:

- `render`  - populate a page's table, apply search/category/sort and write it out.
- `pages`   - list page identities from the page map.
- `encode`  - obfuscate a dataset file in place.
- `decode`  - print (or rewrite) a dataset file as plain JSON.
- `version` - print the package version.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from typer import BadParameter

from statline import __version__
from statline.cli.common import (
    DEBUG_OPTION,
    KEY_OPTION,
    LOG_FORMAT_OPTION,
    LOG_LEVEL_OPTION,
    QUIET_OPTION,
    SITE_ROOT_OPTION,
    LogFormat,
    load_settings,
    local_dataset_path,
    resolve_logging,
)
from statline.codec import decode_payload, encode_payload, is_obfuscated
from statline.engine import TableEngine
from statline.exceptions import CodecError, ColumnError, ConfigError
from statline.loader import DataLoader
from statline.logging import create_logger_context
from statline.render import render_html, to_frame, write_workbook

app = typer.Typer(
    help=(
        "statline - sortable, filterable stats tables from a site's page map.\n\n"
        "## Quick Start\n\n"
        "### 1. See which pages have tables\n"
        "```bash\n"
        "statline pages --site-root ./site\n"
        "```\n\n"
        "### 2. Render a page, searched and sorted\n"
        "```bash\n"
        "statline render npi.html --site-root ./site \\\n"
        "    --query duke --sort 'NPI Value' --sort 'NPI Value'\n"
        "```\n\n"
        "### 3. Export the visible rows\n"
        "```bash\n"
        "statline render npi.html --site-root ./site --output npi.xlsx\n"
        "```\n"
    ),
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

_HTML_SUFFIXES = {".html", ".htm"}


def _sort_target(value: str) -> int | str:
    text = value.strip()
    return int(text) if text.isdigit() else text


@app.command("render")
def render_command(
    location: str = typer.Argument(..., help="Page location or file name, e.g. `npi.html` or `/stats/npi`."),
    site_root: Optional[str] = SITE_ROOT_OPTION,
    query: str = typer.Option("", "--query", "-q", help="Search text matched against the identity column."),
    category: str = typer.Option("", "--category", "-c", help="Conference/category to keep (empty or `all` keeps every row)."),
    sort: List[str] = typer.Option(
        [],
        "--sort",
        "-s",
        help="Header text or column index to click; repeat the same header to flip direction.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Output file (.html, .xlsx or .csv). Defaults to HTML on stdout.",
    ),
    log_format: Optional[LogFormat] = LOG_FORMAT_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION,
    debug: bool = DEBUG_OPTION,
    quiet: bool = QUIET_OPTION,
) -> None:
    """Render one page's table."""

    suffix = output.suffix.lower() if output is not None else ".html"
    if suffix not in _HTML_SUFFIXES | {".xlsx", ".csv"}:
        raise BadParameter(f"Unsupported output type: {suffix or '(none)'}", param_hint="output")

    settings = load_settings(site_root)
    effective_format, effective_level = resolve_logging(
        log_format=log_format,
        log_level=log_level,
        debug=debug,
        quiet=quiet,
        settings=settings,
    )

    with create_logger_context(log_format=effective_format, log_level=effective_level) as log_ctx:
        with DataLoader(settings, logger=log_ctx.logger) as loader:
            try:
                engine = TableEngine.for_location(loader, location, logger=log_ctx.logger)
            except ConfigError as exc:
                typer.echo(f"Error: {exc}", err=True)
                raise typer.Exit(code=1) from exc

            if engine is None:
                typer.echo(f"No table page for {location!r}", err=True)
                raise typer.Exit(code=1)

            if query or category:
                engine.search(query)
                engine.select_category(category)
            for target in sort:
                try:
                    engine.sort(_sort_target(target))
                except ColumnError as exc:
                    raise BadParameter(str(exc), param_hint="sort") from exc

            progress = engine.progress()
            if progress:
                for stat in progress.values():
                    typer.echo(f"{stat.field} {stat.text} ({stat.count}/{stat.total})", err=True)

            table = engine.table
            if output is None:
                typer.echo(render_html(table), nl=False)
                return

            output.parent.mkdir(parents=True, exist_ok=True)
            if suffix == ".xlsx":
                write_workbook(table, output, sheet_title=engine.page.title or engine.page_id)
            elif suffix == ".csv":
                to_frame(table).write_csv(output)
            else:
                output.write_text(render_html(table), encoding="utf-8")
            typer.echo(f"Wrote {table.visible_count} rows to {output}", err=True)


@app.command("pages")
def pages_command(site_root: Optional[str] = SITE_ROOT_OPTION) -> None:
    """List page identities and their data sources."""

    settings = load_settings(site_root)
    with DataLoader(settings) as loader:
        pages = loader.load_page_config()
        flags = loader.feature_flags()

    for page_id, page in sorted(pages.items()):
        typer.echo(f"{page_id}\t{page.data_source or '-'}")
    for flag, enabled in sorted(flags.items()):
        typer.echo(f"# {flag}={'on' if enabled else 'off'}")


@app.command("encode")
def encode_command(
    name: str = typer.Argument(..., help="Dataset name (file `<data_dir>/<name>.json`)."),
    site_root: Optional[str] = SITE_ROOT_OPTION,
    key: Optional[str] = KEY_OPTION,
) -> None:
    """Obfuscate a dataset file in place."""

    settings = load_settings(site_root)
    path = local_dataset_path(settings, name)
    raw = path.read_bytes()
    if is_obfuscated(raw):
        typer.echo(f"{path} is already encoded", err=True)
        return

    secret = key or settings.obfuscation_key
    try:
        payload = decode_payload(raw, secret)
        path.write_bytes(encode_payload(payload, secret))
    except CodecError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Encoded {path}", err=True)


@app.command("decode")
def decode_command(
    name: str = typer.Argument(..., help="Dataset name (file `<data_dir>/<name>.json`)."),
    site_root: Optional[str] = SITE_ROOT_OPTION,
    key: Optional[str] = KEY_OPTION,
    write: bool = typer.Option(False, "--write", help="Rewrite the file as plain JSON instead of printing it."),
) -> None:
    """Print a dataset file as plain JSON."""

    settings = load_settings(site_root)
    path = local_dataset_path(settings, name)
    try:
        payload = decode_payload(path.read_bytes(), key or settings.obfuscation_key)
    except CodecError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if write:
        path.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Decoded {path}", err=True)
        return
    typer.echo(text)


@app.command("version")
def version_command() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entrypoint used by console scripts and `python -m statline`."""
    app()


__all__ = ["app", "main"]

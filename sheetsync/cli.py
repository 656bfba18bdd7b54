"""Typer based command line entry points for SheetSync."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from sheetsync.core.errors import SheetSyncError
from sheetsync.core.logger import get_logger, set_level
from sheetsync.core.models import SyncResult
from sheetsync.core.pipeline import SyncPipeline
from sheetsync.core.profiles import get_settings
from sheetsync.services.binding import parse
from sheetsync_io import load_document, load_table, save_document

ALLOWED_SCOPES = {"document", "page", "selection"}

app = typer.Typer(help="Sync tabular data into scene documents through layer names.")


def _validate_scope(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.lower()
    if value not in ALLOWED_SCOPES:
        raise typer.BadParameter("scope must be one of document, page, selection")
    return value


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    get_logger()
    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    set_level(level_value)


def _print_result(result: SyncResult) -> None:
    status = "ok" if result.success else ("cancelled" if result.cancelled else "failed")
    color = typer.colors.GREEN if result.success else typer.colors.RED
    typer.secho(f"Sync {status}", fg=color)
    typer.echo(f"Layers processed: {result.layers_processed}")
    typer.echo(f"Layers updated: {result.layers_updated}")
    for issue in result.errors:
        where = f"{issue.layer_name} ({issue.layer_id}): " if issue.layer_id else ""
        typer.secho(f"error: {where}{issue.message}", fg=typer.colors.RED, err=True)
    for warning in result.warnings:
        typer.secho(f"warning: {warning}", fg=typer.colors.YELLOW, err=True)


@app.command("sync")
def cli_sync(
    data: Path = typer.Argument(..., help="Table source (.xlsx/.csv/.json)"),
    document: Path = typer.Argument(..., help="Scene document JSON"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the synced document here (default: in place)"),
    scope: Optional[str] = typer.Option(None, "--scope", help="document/page/selection", callback=_validate_scope),
    page: Optional[str] = typer.Option(None, "--page", help="Page name for page/selection scope"),
    selection: List[str] = typer.Option([], "--selection", help="Node id to select; repeatable"),
    profile: Optional[str] = typer.Option(None, "--profile", help="Profile name from profiles.yaml"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for random index modes"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the run result as JSON"),
) -> None:
    """Run a sync of DATA into DOCUMENT."""

    logger = get_logger()
    try:
        settings = get_settings(profile)
        table = load_table(data)
        doc = load_document(document)
    except SheetSyncError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    overrides = {}
    if seed is not None:
        overrides["random_seed"] = seed
    if selection:
        doc.selection = list(selection)
        overrides["scope"] = scope or "selection"
    elif scope:
        overrides["scope"] = scope
    if overrides:
        settings = settings.model_copy(update=overrides)

    def progress(message: str, percent: int) -> None:
        typer.secho(f"{percent:3d}% {message}", err=True)

    pipeline = SyncPipeline(settings, logger=logger)
    result = pipeline.run(doc, table, page_name=page, progress_cb=progress)
    _print_result(result)

    target = save_document(doc, out or document)
    typer.echo(f"Document: {target}")
    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(result.model_dump(), ensure_ascii=False, indent=2), encoding="utf-8")
        typer.echo(f"Report: {report}")

    if not result.success:
        raise typer.Exit(code=1)


@app.command("parse")
def cli_parse(name: str = typer.Argument(..., help="Layer name to decode")) -> None:
    """Show how a layer name is decoded."""

    binding = parse(name)
    payload = {
        "has_binding": binding.has_binding,
        "labels": list(binding.labels),
        "worksheet": binding.worksheet,
        "index": str(binding.index) if binding.index else None,
        "is_ignored": binding.is_ignored,
        "force_include": binding.force_include,
        "is_repeat_frame": binding.is_repeat_frame,
    }
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("labels")
def cli_labels(data: Path = typer.Argument(..., help="Table source (.xlsx/.csv/.json)")) -> None:
    """List worksheets and their labels."""

    try:
        table = load_table(data)
    except SheetSyncError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc

    for ws in table.worksheets:
        marker = " (active)" if ws.name == table.active_worksheet else ""
        typer.secho(f"{ws.name}{marker} [{ws.orientation}, {ws.row_count} rows]", bold=True)
        for label in ws.labels:
            typer.echo(f"  {label}")


if __name__ == "__main__":
    app()

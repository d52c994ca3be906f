"""
Root Typer application for the tracespine CLI.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table
from typer import Typer

from tracespine.cli.utils import console, print_load_error
from tracespine.core.errors import LoadError
from tracespine.core.logging import configure_logging
from tracespine.core.models import Artifact, Artifacts, Settings
from tracespine.core.pipeline import load_path
from tracespine.core.settings import get_settings

app = Typer(
    name="tracespine",
    help="tracespine -- requirements traceability for source trees.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_VERBOSITY = {0: None, 1: "INFO", 2: "DEBUG"}


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("tracespine")
        except PackageNotFoundError:
            from tracespine import __version__ as v
        typer.echo(f"tracespine {v}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase log verbosity (up to -vv)."
    ),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tracespine CLI -- load, list and check artifacts."""
    settings = get_settings()
    level = _VERBOSITY.get(min(verbose, 2)) or settings.log_level
    configure_logging(level=level, json_format=settings.json_logs, colors=settings.color)


# ── Commands ─────────────────────────────────────────────────────────────


def _load(path: Path) -> tuple[Artifacts, Settings]:
    try:
        return load_path(path)
    except LoadError as exc:
        print_load_error(exc)
        raise typer.Exit(code=1) from exc


def _to_dict(artifact: Artifact) -> dict:
    return {
        "name": artifact.name.raw,
        "type": artifact.type.value,
        "path": str(artifact.path),
        "text": artifact.text,
        "refs": artifact.refs,
        "partof": sorted(str(n) for n in artifact.partof),
        "loc": str(artifact.loc) if artifact.loc else None,
    }


@app.command("ls")
def list_artifacts(
    pattern: str = typer.Argument("", help="Only show names containing this text (case-insensitive)"),
    path: Path = typer.Option(Path("."), "--path", "-p", help="File or directory to load"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List loaded artifacts."""
    artifacts, settings = _load(path)
    needle = pattern.upper()
    selected = sorted(
        (a for name, a in artifacts.items() if needle in name.value),
        key=lambda a: a.name,
    )

    if as_json:
        console.print_json(json.dumps([_to_dict(a) for a in selected]))
        return

    if not selected:
        console.print("[dim]No artifacts found.[/dim]")
        return

    color = settings.color and get_settings().color
    table = Table(title=f"Artifacts ({len(selected)})")
    table.add_column("Name", style="bold cyan" if color else None, no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Part Of")
    table.add_column("Path", style="dim" if color else None)
    for artifact in selected:
        table.add_row(
            escape(artifact.name.raw),
            artifact.type.value,
            escape(", ".join(sorted(str(n) for n in artifact.partof))) or "-",
            escape(str(artifact.path)),
        )
    console.print(table)


@app.command("check")
def check(
    path: Path = typer.Argument(Path("."), help="File or directory to load"),
) -> None:
    """Load everything and report every problem found."""
    artifacts, _ = _load(path)
    console.print(f"[green]ok[/green]: {len(artifacts)} artifacts loaded from {escape(str(path))}", soft_wrap=True)

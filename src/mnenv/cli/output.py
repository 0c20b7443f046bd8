"""Console objects and the text/JSON renderings shared by the commands."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any, Callable, Iterable, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mnenv.errors import MnenvError
from mnenv.models.version import ArtifactVersion, format_timestamp

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)


class OutputFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


FORMAT_OPTION_HELP = "Output format: text or json"


def run_or_exit(fn: Callable[[], T]) -> T:
    """Run *fn*, turning any mnenv error into a red message and exit status 1."""
    try:
        return fn()
    except MnenvError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


def print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def version_payload(version: ArtifactVersion) -> dict[str, Any]:
    """JSON form of one entry: its persisted fields plus the display name."""
    payload = version.to_dict()
    payload["display_name"] = version.display_name
    return payload


def versions_payload(versions: list[ArtifactVersion]) -> dict[str, Any]:
    return {
        "count": len(versions),
        "latest": versions[-1].version if versions else None,
        "versions": [version_payload(v) for v in versions],
    }


def published_date(version: ArtifactVersion) -> str:
    return version.published_at.strftime("%Y-%m-%d") if version.published_at else ""


def versions_table(title: str, versions: Iterable[ArtifactVersion]) -> Table:
    table = Table(title=title, title_justify="left", show_lines=False)
    table.add_column("Version", style="cyan", no_wrap=True)
    table.add_column("Published", style="dim")
    table.add_column("Details")

    for version in versions:
        extras = ", ".join(f"{k}={v}" for k, v in version.extra_fields().items() if v not in (None, "", [], {}))
        table.add_row(version.display_name, published_date(version), escape(extras))
    return table


def print_version_details(source: str, version: ArtifactVersion) -> None:
    console.print(f"[bold]{source.capitalize()} version {version.display_name}[/bold]")
    console.print(f"  version: {version.version}")
    console.print(f"  published_at: {format_timestamp(version.published_at) or 'N/A'}")
    console.print(f"  parsed_at: {format_timestamp(version.parsed_at) or 'N/A'}")
    for key, value in version.extra_fields().items():
        console.print(f"  {key}: {escape(str(value))}")

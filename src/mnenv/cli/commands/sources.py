"""Per-source registry commands: ``mnenv <source> list|refresh|revamp|update|info``."""

from __future__ import annotations

import logging

import typer

from mnenv.cli.output import (
    FORMAT_OPTION_HELP,
    OutputFormat,
    console,
    print_json,
    print_version_details,
    run_or_exit,
    version_payload,
    versions_payload,
    versions_table,
)
from mnenv.errors import MnenvError
from mnenv.fetchers.http import build_http_client
from mnenv.models.version import parse_version
from mnenv.registry import REPOSITORIES, RefreshMode, RefreshReport, build_pipeline, repository_class
from mnenv.runtime.config import load_config

logger = logging.getLogger(__name__)

SOURCE_HELP = {
    "gemfile": "Manage Ruby (Gemfile) versions extracted from the metanorma/metanorma image",
    "snap": "Manage Snap store versions",
    "homebrew": "Manage Homebrew tap versions",
    "chocolatey": "Manage Chocolatey package versions",
    "binary": "Manage self-contained binary releases",
}


def _refresh(source_name: str, mode: RefreshMode, target_version: str | None = None) -> RefreshReport:
    config = load_config()
    with build_http_client(config) as client:
        pipeline = build_pipeline(source_name, config, client)
        with console.status(f"[cyan]Refreshing {source_name} ({mode.value})...[/cyan]"):
            return pipeline.run(mode, target_version)


def _report(report: RefreshReport) -> None:
    console.print(
        f"[green]✓[/green] {report.source}: {len(report.recorded)} of {report.remote_count} "
        f"remote version(s) recorded ({report.mode.value})"
    )
    if report.preserved:
        console.print(f"  [dim]kept {report.preserved} stored entries missing from the current listing[/dim]")


def build_source_app(source_name: str) -> typer.Typer:
    """Typer sub-application for one release channel."""
    app = typer.Typer(help=SOURCE_HELP.get(source_name, f"Manage {source_name} versions"))

    @app.command("list")
    def list_command(
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """List known versions."""

        def _run() -> None:
            versions = repository_class(source_name).for_config(load_config()).all()
            if output_format is OutputFormat.JSON:
                payload = versions_payload(versions)
                payload["source"] = source_name
                print_json(payload)
                return
            if not versions:
                console.print(f"No {source_name} versions known. Run: mnenv {source_name} refresh")
                return
            console.print(versions_table(f"{source_name} versions ({len(versions)})", versions))

        run_or_exit(_run)

    @app.command("refresh")
    def refresh_command() -> None:
        """Record remote versions missing locally (incremental)."""
        run_or_exit(lambda: _report(_refresh(source_name, RefreshMode.INCREMENTAL)))

    @app.command("revamp")
    def revamp_command() -> None:
        """Re-fetch and overwrite every remote version."""
        run_or_exit(lambda: _report(_refresh(source_name, RefreshMode.REVAMP)))

    @app.command("update")
    def update_command(version: str = typer.Argument(..., help="Version to re-fetch")) -> None:
        """Re-fetch a single version."""
        run_or_exit(lambda: _report(_refresh(source_name, RefreshMode.REPLACE, version)))

    @app.command("info")
    def info_command(
        version: str = typer.Argument(..., help="Version to show"),
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """Show the stored details of one version."""

        def _run() -> None:
            parse_version(version)
            repository = repository_class(source_name).for_config(load_config())
            matches = [v for v in repository.all() if v.version == version]
            if not matches:
                raise MnenvError(
                    f"Version '{version}' not found for {source_name}. "
                    f"Run: mnenv {source_name} list"
                )
            if output_format is OutputFormat.JSON:
                payloads = [{**version_payload(v), "source": source_name} for v in matches]
                print_json(payloads[0] if len(payloads) == 1 else payloads)
                return
            for match in matches:
                print_version_details(source_name, match)

        run_or_exit(_run)

    return app


SOURCE_APPS: dict[str, typer.Typer] = {name: build_source_app(name) for name in REPOSITORIES}

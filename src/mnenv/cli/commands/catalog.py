"""Cross-source listing and the tool's own version."""

from __future__ import annotations

import typer

from mnenv.cli.output import (
    FORMAT_OPTION_HELP,
    OutputFormat,
    console,
    print_json,
    run_or_exit,
    versions_payload,
    versions_table,
)
from mnenv.registry import REPOSITORIES
from mnenv.runtime.config import load_config


def register(app: typer.Typer) -> None:
    """Attach ``list-all`` and ``version`` to the top-level application."""

    @app.command("list-all")
    def list_all_command(
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """List known versions of every source."""

        def _run() -> None:
            config = load_config()
            listings = {name: repo.for_config(config).all() for name, repo in REPOSITORIES.items()}

            if output_format is OutputFormat.JSON:
                print_json({name: versions_payload(versions) for name, versions in listings.items()})
                return

            for name, versions in listings.items():
                if not versions:
                    console.print(f"[dim]{name}: no versions known (run: mnenv {name} refresh)[/dim]")
                    continue
                console.print(versions_table(f"{name} versions ({len(versions)})", versions))

        run_or_exit(_run)

    @app.command("version")
    def version_command() -> None:
        """Show the mnenv version."""
        from mnenv import __version__

        typer.echo(f"mnenv {__version__}")

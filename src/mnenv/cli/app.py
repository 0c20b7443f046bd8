"""Top-level typer application."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from mnenv.cli.commands import SOURCE_APPS, catalog, install, session
from mnenv.cli.output import err_console

app = typer.Typer(
    name="mnenv",
    help="Metanorma version manager: track releases, install versions and switch between them",
    add_completion=False,
    no_args_is_help=True,
)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=verbose)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Metanorma version manager."""
    configure_logging(verbose)


for _name, _source_app in SOURCE_APPS.items():
    app.add_typer(_source_app, name=_name)

session.register(app)
install.register(app)
catalog.register(app)


def main() -> None:
    app()

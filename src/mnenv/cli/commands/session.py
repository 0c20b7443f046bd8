"""Choosing the active version: use, global, local, versions, current, init."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from mnenv.cli.output import FORMAT_OPTION_HELP, OutputFormat, console, print_json, run_or_exit
from mnenv.cli.ui import select_with_arrows
from mnenv.core.constants import (
    GLOBAL_SOURCE_FILE,
    GLOBAL_VERSION_FILE,
    INSTALL_SOURCES,
    LOCAL_SOURCE_FILE,
    LOCAL_VERSION_FILE,
)
from mnenv.errors import MnenvError, ResolutionError
from mnenv.models.version import parse_version
from mnenv.resolution import ContextResolver, Resolution, write_marker
from mnenv.runtime.config import MnenvConfig, load_config
from mnenv.shells import ShellAdapter, ShellFactory

SOURCE_OPTION_HELP = "Source type (gemfile or binary)"


def _check_source(source: str | None) -> str | None:
    if source is not None and source not in INSTALL_SOURCES:
        raise MnenvError(f"Unknown source: {source}. Use: {' or '.join(INSTALL_SOURCES)}")
    return source


def _shell(config: MnenvConfig, name: str | None) -> ShellAdapter:
    if name:
        try:
            return ShellFactory.get(name)
        except ValueError as exc:
            raise MnenvError(str(exc)) from exc
    return ShellFactory.detect(config.environ)


def _select_installed(resolver: ContextResolver) -> tuple[str, str]:
    installed = resolver.installed()
    if not installed:
        raise MnenvError("No versions installed. Run: mnenv install --list")

    version = select_with_arrows(
        {entry.version: entry.source or "unknown" for entry in reversed(installed)},
        "Select a version",
    )
    source = select_with_arrows(
        {name: "" for name in INSTALL_SOURCES},
        "Select source",
        default_key=resolver.installed_source(version),
    )
    return version, source


def _version_and_source(
    resolver: ContextResolver,
    version: str | None,
    source: str | None,
    interactive: bool,
) -> tuple[str, str]:
    _check_source(source)
    if interactive or version is None:
        selected_version, selected_source = _select_installed(resolver)
        return selected_version, source or selected_source
    parse_version(version)
    return version, source or resolver.installed_source(version) or resolver.resolve_source().value


def _current(resolver: ContextResolver) -> tuple[Resolution | None, Resolution]:
    try:
        version = resolver.resolve_version()
    except ResolutionError:
        version = None
    return version, resolver.resolve_source()


def register(app: typer.Typer) -> None:
    """Attach the session commands to the top-level application."""

    @app.command("use")
    def use_command(
        version: Optional[str] = typer.Argument(None, help="Version to activate in this shell"),
        source: Optional[str] = typer.Option(None, "--source", "-s", help=SOURCE_OPTION_HELP),
        interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick the version interactively"),
        shell: Optional[str] = typer.Option(None, "--shell", help="Shell to print commands for (default: detected)"),
    ) -> None:
        """Print the commands that select a version for the current shell session."""

        def _run() -> None:
            config = load_config()
            resolver = ContextResolver(config)
            chosen_version, chosen_source = _version_and_source(resolver, version, source, interactive)
            resolver.verify_installed(chosen_version, chosen_source)
            typer.echo(_shell(config, shell).describe_activation(chosen_version, chosen_source))

        run_or_exit(_run)

    @app.command("global")
    def global_command(
        version: Optional[str] = typer.Argument(None, help="Version to use by default"),
        source: Optional[str] = typer.Option(None, "--source", "-s", help=SOURCE_OPTION_HELP),
        interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick the version interactively"),
    ) -> None:
        """Set the default version for every directory."""

        def _run() -> None:
            config = load_config()
            resolver = ContextResolver(config)
            chosen_version, chosen_source = _version_and_source(resolver, version, source, interactive)
            resolver.verify_installed(chosen_version, chosen_source)
            write_marker(config.root / GLOBAL_VERSION_FILE, chosen_version)
            write_marker(config.root / GLOBAL_SOURCE_FILE, chosen_source)
            console.print(f"Global Metanorma version set to {chosen_version} (source: {chosen_source})")

        run_or_exit(_run)

    @app.command("local")
    def local_command(
        version: Optional[str] = typer.Argument(None, help="Version for this directory tree"),
        source: Optional[str] = typer.Option(None, "--source", "-s", help=SOURCE_OPTION_HELP),
        interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick the version interactively"),
    ) -> None:
        """Pin a version for the current directory and its subdirectories."""

        def _run() -> None:
            config = load_config()
            resolver = ContextResolver(config)
            chosen_version, chosen_source = _version_and_source(resolver, version, source, interactive)
            resolver.verify_installed(chosen_version, chosen_source)
            write_marker(config.cwd / LOCAL_VERSION_FILE, chosen_version)
            write_marker(config.cwd / LOCAL_SOURCE_FILE, chosen_source)
            console.print(f"Local Metanorma version set to {chosen_version} (source: {chosen_source})")
            console.print(f"Created {LOCAL_VERSION_FILE} and {LOCAL_SOURCE_FILE}")

        run_or_exit(_run)

    @app.command("versions")
    def versions_command(
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """List installed versions."""

        def _run() -> None:
            resolver = ContextResolver(load_config())
            installed = resolver.installed()
            current_version, current_source = _current(resolver)
            active = (current_version.value if current_version else None, current_source.value)

            if output_format is OutputFormat.JSON:
                print_json(
                    {
                        "current_version": active[0],
                        "current_source": active[1],
                        "installed": [
                            {
                                "version": entry.version,
                                "source": entry.source or "unknown",
                                "current": (entry.version, entry.source) == active,
                            }
                            for entry in installed
                        ],
                    }
                )
                return

            if not installed:
                console.print("No versions installed.")
                console.print("\nRun: mnenv available")
                return

            console.print("Installed Metanorma versions:")
            for entry in reversed(installed):
                marker = "* " if (entry.version, entry.source) == active else "  "
                console.print(f"  {marker}{entry.version} (source: {entry.source or 'unknown'})")
            console.print(f"\nCurrent version: {active[0] or 'none'}")
            console.print(f"Current source: {active[1]}")

        run_or_exit(_run)

    @app.command("current")
    def current_command(
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """Show the active version and source, and where each was set."""

        def _run() -> None:
            resolver = ContextResolver(load_config())
            version, source = resolver.resolve_current()

            if output_format is OutputFormat.JSON:
                payload: dict[str, Any] = {}
                for key, resolution in (("version", version), ("source", source)):
                    payload[key] = resolution.value
                    payload[f"{key}_tier"] = resolution.tier.value
                    payload[f"{key}_origin"] = resolution.origin
                print_json(payload)
                return

            console.print(f"{version.value} [dim](set by {version.describe()})[/dim]")
            console.print(f"source: {source.value} [dim](set by {source.describe()})[/dim]")

        run_or_exit(_run)

    @app.command("init")
    def init_command(
        shell: Optional[str] = typer.Option(None, "--shell", help="Shell to configure (default: detected)"),
    ) -> None:
        """Create the mnenv root and print how to put the shims on PATH."""

        def _run() -> None:
            config = load_config()
            config.versions_dir.mkdir(parents=True, exist_ok=True)
            config.shims_dir.mkdir(parents=True, exist_ok=True)

            adapter = _shell(config, shell)
            rc_file = adapter.config_file_path(_home(config))
            line = adapter.path_setup(config.shims_dir)

            console.print(f"[green]✓[/green] mnenv root: {config.root}")
            if rc_file is not None:
                console.print(f"Add this line to {rc_file}:")
            else:
                console.print("Run this once to add the shims to PATH:")
            typer.echo(f"  {line}")

        run_or_exit(_run)


def _home(config: MnenvConfig) -> Path:
    for key in ("HOME", "USERPROFILE"):
        if value := config.environ.get(key):
            return Path(value)
    return Path.home()

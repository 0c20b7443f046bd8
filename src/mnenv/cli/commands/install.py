"""Installation commands: install, uninstall, available, rehash."""

from __future__ import annotations

from typing import Any, Optional

import typer

from mnenv.cli.output import FORMAT_OPTION_HELP, OutputFormat, console, print_json, run_or_exit
from mnenv.cli.ui import select_with_arrows
from mnenv.core.constants import INSTALL_SOURCES, SOURCE_BINARY, SOURCE_GEMFILE
from mnenv.errors import MnenvError, ResolutionError
from mnenv.installers import create_installer, uninstall
from mnenv.models.version import ArtifactVersion
from mnenv.registry import repository_class
from mnenv.resolution import ContextResolver
from mnenv.runtime.config import load_config
from mnenv.shims import ShimManager

SOURCE_DESCRIPTIONS = {
    SOURCE_GEMFILE: "faster, on-demand loading, requires ruby and bundler, upgradable",
    SOURCE_BINARY: "self-contained binary, no development tools, fixed",
}


def _check_source(source: str) -> str:
    if source not in INSTALL_SOURCES:
        raise MnenvError(f"Unknown source: {source}. Use: {' or '.join(INSTALL_SOURCES)}")
    return source


def _available(resolver: ContextResolver, source: str) -> list[ArtifactVersion]:
    return repository_class(source).for_config(resolver.config).all()


def _availability_rows(resolver: ContextResolver, source: str) -> list[dict[str, Any]]:
    try:
        active = (resolver.resolve_version().value, resolver.resolve_source().value)
    except ResolutionError:
        active = (None, resolver.resolve_source().value)

    rows = []
    for version in reversed(_available(resolver, source)):
        installed = resolver.version_dir(version.version).is_dir()
        installed_source = resolver.installed_source(version.version) if installed else None
        rows.append(
            {
                "version": version.version,
                "display_name": version.display_name,
                "published_at": version.published_at.isoformat() if version.published_at else None,
                "installed": installed,
                "installed_source": installed_source,
                "current": installed and (version.version, installed_source) == active,
            }
        )
    return rows


def _print_availability(source: str, rows: list[dict[str, Any]]) -> None:
    console.print(f"Available Metanorma versions (source: {source}):")
    if not rows:
        console.print(f"  none recorded yet. Run: mnenv {source} refresh")
        return
    for row in rows:
        marker = "*" if row["current"] else " "
        status = ""
        if row["current"]:
            status = " \\[current]"
        elif row["installed"]:
            status = " \\[installed]"
        if row["installed"] and row["installed_source"] not in (None, source):
            status += f" (as {row['installed_source']})"
        console.print(f"  {marker} {row['display_name']:<15}{status}")


def register(app: typer.Typer) -> None:
    """Attach the installation commands to the top-level application."""

    @app.command("install")
    def install_command(
        version: Optional[str] = typer.Argument(None, help="Version to install"),
        source: Optional[str] = typer.Option(None, "--source", "-s", help="Installation source (gemfile or binary)"),
        interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick source and version interactively"),
        list_versions: bool = typer.Option(False, "--list", help="List installable versions and exit"),
        force: bool = typer.Option(False, "--force", help="Reinstall without asking if already installed"),
    ) -> None:
        """Install a Metanorma version."""

        def _run() -> None:
            config = load_config()
            resolver = ContextResolver(config)
            chosen_source = _check_source(source) if source else None

            if list_versions:
                listed = chosen_source or resolver.resolve_source().value
                _print_availability(listed, _availability_rows(resolver, _check_source(listed)))
                return

            chosen_version = version
            if interactive or chosen_version is None:
                if chosen_source is None:
                    chosen_source = select_with_arrows(SOURCE_DESCRIPTIONS, "Select installation source")
                chosen_version = select_with_arrows(
                    {
                        row["version"]: f"installed: {row['installed_source']}" if row["installed"] else ""
                        for row in _availability_rows(resolver, chosen_source)
                    },
                    "Select a version to install",
                )
            if chosen_source is None:
                chosen_source = _check_source(resolver.resolve_source().value)

            installer = create_installer(chosen_version, chosen_source, config)
            reinstall = force
            if installer.installed() and not force:
                if not typer.confirm(
                    f"Version {chosen_version} is already installed. Reinstall from {chosen_source}?"
                ):
                    console.print("Installation cancelled.")
                    return
                reinstall = True

            console.print(f"Installing Metanorma {chosen_version} (source: {chosen_source})...")
            installer.install(force=reinstall)
            console.print(f"[green]✓[/green] Installed Metanorma {chosen_version} (source: {chosen_source})")

        run_or_exit(_run)

    @app.command("uninstall")
    def uninstall_command(
        version: str = typer.Argument(..., help="Version to remove"),
        force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
    ) -> None:
        """Uninstall a Metanorma version."""

        def _run() -> None:
            config = load_config()
            if not force and not typer.confirm(f"Uninstall Metanorma {version}? This cannot be undone."):
                console.print("Uninstallation cancelled.")
                return
            uninstall(version, config)
            console.print(f"Uninstalled Metanorma {version}")

        run_or_exit(_run)

    @app.command("available")
    def available_command(
        source: str = typer.Argument("all", help="gemfile, binary or all"),
        output_format: OutputFormat = typer.Option(OutputFormat.TEXT, "--format", "-f", help=FORMAT_OPTION_HELP),
    ) -> None:
        """List installable versions and whether they are installed."""

        def _run() -> None:
            resolver = ContextResolver(load_config())
            sources = INSTALL_SOURCES if source == "all" else (_check_source(source),)
            rows = {name: _availability_rows(resolver, name) for name in sources}

            if output_format is OutputFormat.JSON:
                if source == "all":
                    print_json(rows)
                else:
                    print_json({"source": source, "versions": rows[source]})
                return

            for index, name in enumerate(sources):
                if index:
                    console.print()
                _print_availability(name, rows[name])

        run_or_exit(_run)

    @app.command("rehash")
    def rehash_command() -> None:
        """Regenerate shims for every installed executable."""

        def _run() -> None:
            written = ShimManager(load_config()).regenerate_all()
            console.print(f"[green]✓[/green] Regenerated {len(written)} shim(s)")

        run_or_exit(_run)

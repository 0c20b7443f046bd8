"""mnenv: a per-directory, per-shell version manager for Metanorma."""

__version__ = "0.1.0"


def main() -> None:
    """Console-script entry point."""
    from mnenv.cli.app import main as cli_main

    cli_main()

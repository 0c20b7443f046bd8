"""Command-line interface: the typer application and its console helpers."""

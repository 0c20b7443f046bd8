"""CLI command modules for mnenv."""

from mnenv.cli.commands import catalog, install, session
from mnenv.cli.commands.sources import SOURCE_APPS, build_source_app

__all__ = ["SOURCE_APPS", "build_source_app", "catalog", "install", "session"]

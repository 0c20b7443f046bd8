"""Contract shared by the shell dialects mnenv generates shims for."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

# Placeholder for the executable name inside the shim templates.
EXECUTABLE_TOKEN = "@EXECUTABLE@"


@runtime_checkable
class ShellAdapter(Protocol):
    """One shell dialect.

    ``shim_body`` must be a pure function of the executable name: the shim
    manager relies on regenerating byte-identical files.
    """

    name: str
    shim_extension: str
    is_windows_family: bool

    def shim_body(self, executable: str) -> str: ...

    def describe_activation(self, version: str, source: str | None = None) -> str: ...

    def config_file_path(self, home: Path) -> Path | None: ...

    def path_setup(self, shims_dir: Path) -> str: ...


def render(template: str, executable: str) -> str:
    return template.replace(EXECUTABLE_TOKEN, executable)

"""Shell detection and lookup."""

from __future__ import annotations

import logging
import os
from pathlib import PurePath, PureWindowsPath
from typing import Callable, Mapping

from mnenv.shells.base import ShellAdapter
from mnenv.shells.cmd import CmdShell
from mnenv.shells.posix import PosixShell
from mnenv.shells.powershell import PowerShellShell

logger = logging.getLogger(__name__)

SHELLS: dict[str, Callable[[], ShellAdapter]] = {
    "bash": lambda: PosixShell("bash"),
    "sh": lambda: PosixShell("sh"),
    "dash": lambda: PosixShell("dash"),
    "zsh": lambda: PosixShell("zsh"),
    "ksh": lambda: PosixShell("ksh"),
    "fish": lambda: PosixShell("fish"),
    "powershell": lambda: PowerShellShell("powershell"),
    "pwsh": lambda: PowerShellShell("pwsh"),
    "cmd": CmdShell,
}


def _shell_name(path: str) -> str:
    name = PureWindowsPath(path).name if "\\" in path else PurePath(path).name
    name = name.lower()
    return name[:-4] if name.endswith(".exe") else name


class ShellFactory:
    """Maps shell names and environments to :class:`ShellAdapter` instances."""

    @staticmethod
    def get(name: str) -> ShellAdapter:
        """Return the adapter registered under *name*.

        Raises:
            ValueError: If the shell is unknown.
        """
        try:
            return SHELLS[_shell_name(name)]()
        except KeyError:
            raise ValueError(f"Unknown shell: {name}. Supported: {', '.join(SHELLS)}") from None

    @staticmethod
    def detect(environ: Mapping[str, str], *, windows: bool | None = None) -> ShellAdapter:
        """Guess the user's shell from ``SHELL``, ``PSModulePath`` and ``COMSPEC``.

        Unknown shells fall back to the platform default (POSIX ``sh``
        semantics, or cmd on Windows).
        """
        windows = os.name == "nt" if windows is None else windows

        if shell := environ.get("SHELL"):
            name = _shell_name(shell)
            if name in SHELLS:
                return SHELLS[name]()
            logger.debug("Unrecognised SHELL %r", shell)

        if windows:
            comspec = _shell_name(environ.get("COMSPEC", ""))
            if comspec in {"powershell", "pwsh"}:
                return PowerShellShell(comspec)
            # PowerShell prepends the per-user module directory; cmd.exe only
            # inherits the two machine-wide entries.
            if len([p for p in environ.get("PSModulePath", "").split(";") if p]) >= 3:
                return PowerShellShell()
            return CmdShell()

        return PosixShell("bash")

    @staticmethod
    def platform_shells(windows: bool | None = None) -> list[ShellAdapter]:
        """Every dialect shims are generated for on this platform."""
        windows = os.name == "nt" if windows is None else windows
        if windows:
            return [PowerShellShell(), CmdShell()]
        return [PosixShell()]

"""Shell dialects for the generated shims."""

from mnenv.shells.base import ShellAdapter
from mnenv.shells.cmd import CmdShell
from mnenv.shells.factory import SHELLS, ShellFactory
from mnenv.shells.posix import PosixShell
from mnenv.shells.powershell import PowerShellShell

__all__ = [
    "CmdShell",
    "PosixShell",
    "PowerShellShell",
    "SHELLS",
    "ShellAdapter",
    "ShellFactory",
]

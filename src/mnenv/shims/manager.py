"""Shim generation and cleanup.

A shim is a small script in ``<root>/shims`` named after an executable
found in some installed version. It resolves the active version and source
when it runs and hands off to the matching executable, so ``regenerate_all``
only has to run when the *set* of executable names changes.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Sequence

from mnenv.core.constants import BIN_DIRNAME, INSTALL_SOURCE_FILE, PRODUCT_NAME, SOURCE_BINARY
from mnenv.resolution.resolver import read_marker
from mnenv.runtime.config import MnenvConfig
from mnenv.shells.base import ShellAdapter
from mnenv.shells.factory import ShellFactory

logger = logging.getLogger(__name__)

WINDOWS_SCRIPT_SUFFIXES = (".cmd", ".bat")


class ShimManager:
    """Keeps ``<root>/shims`` in sync with the installed executables."""

    def __init__(
        self,
        config: MnenvConfig,
        shells: Sequence[ShellAdapter] | None = None,
        *,
        windows: bool | None = None,
    ) -> None:
        self.windows = os.name == "nt" if windows is None else windows
        self.shells = list(shells) if shells is not None else ShellFactory.platform_shells(self.windows)
        self.shims_dir = config.shims_dir
        self.versions_dir = config.versions_dir

    def regenerate_all(self) -> list[Path]:
        """Write one shim per (executable, shell) and drop every other file.

        Returns:
            The shim paths written, sorted.
        """
        self.shims_dir.mkdir(parents=True, exist_ok=True)
        executables = self.discover_executables()

        written = []
        for name in executables:
            for shell in self.shells:
                written.append(self.create_shim(name, shell))

        self.remove_obsolete_shims(executables)
        logger.debug("Regenerated %d shims in %s", len(written), self.shims_dir)
        return sorted(written)

    def create_shim(self, executable: str, shell: ShellAdapter) -> Path:
        path = self.shims_dir / f"{executable}{shell.shim_extension}"
        path.write_bytes(shell.shim_body(executable).encode("utf-8"))
        if not shell.is_windows_family:
            path.chmod(0o755)
        return path

    def discover_executables(self) -> list[str]:
        """Names of every executable provided by some installed version, sorted."""
        if not self.versions_dir.is_dir():
            return []

        names: set[str] = set()
        for version_dir in self.versions_dir.iterdir():
            if not version_dir.is_dir():
                continue
            names.update(self._binstubs(version_dir / BIN_DIRNAME))
            if self._has_binary(version_dir):
                names.add(PRODUCT_NAME)
        return sorted(names)

    def valid_shim_names(self, executables: Sequence[str]) -> set[str]:
        return {f"{name}{shell.shim_extension}" for name in executables for shell in self.shells}

    def remove_obsolete_shims(self, executables: Sequence[str]) -> list[Path]:
        """Delete files in the shims directory that no current shim accounts for.

        Never raises; a file that cannot be removed is logged and left behind.
        """
        if not self.shims_dir.is_dir():
            return []

        valid = self.valid_shim_names(executables)
        removed = []
        for path in sorted(self.shims_dir.iterdir()):
            if path.name in valid:
                continue
            try:
                if path.is_dir():
                    logger.debug("Leaving directory %s in shims dir", path)
                    continue
                path.unlink()
            except OSError as exc:
                logger.warning("Could not remove stale shim %s: %s", path, exc)
                continue
            removed.append(path)
        return removed

    # ------------------------------------------------------------------
    # Discovery helpers
    # ------------------------------------------------------------------

    def _binstubs(self, bin_dir: Path) -> set[str]:
        if not bin_dir.is_dir():
            return set()

        names = set()
        for path in bin_dir.iterdir():
            if not path.is_file():
                continue
            if self.windows:
                if path.suffix.lower() in WINDOWS_SCRIPT_SUFFIXES:
                    names.add(path.stem)
            elif _is_executable(path):
                names.add(path.name)
        return names

    def _has_binary(self, version_dir: Path) -> bool:
        if read_marker(version_dir / INSTALL_SOURCE_FILE) != SOURCE_BINARY:
            return False
        binary = version_dir / (f"{PRODUCT_NAME}.exe" if self.windows else PRODUCT_NAME)
        return binary.is_file() and (self.windows or _is_executable(binary))


def _is_executable(path: Path) -> bool:
    return bool(path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))

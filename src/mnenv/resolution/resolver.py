"""Active (version, source) resolution for the current invocation.

Resolution tiers (checked in order, independently for version and source):
1. ENVIRONMENT -- MNENV_VERSION / MNENV_SOURCE (an empty value is unset)
2. LOCAL       -- nearest .metanorma-version / .metanorma-source walking
                  from the working directory up to the filesystem root
3. GLOBAL      -- <root>/version / <root>/source
4. DEFAULT     -- source "gemfile"; there is no default version

Every call re-reads the filesystem; nothing is cached between calls. The
generated shims carry the same chain in their own dialect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mnenv.core.constants import (
    DEFAULT_SOURCE,
    GLOBAL_SOURCE_FILE,
    GLOBAL_VERSION_FILE,
    INSTALL_SOURCE_FILE,
    LOCAL_SOURCE_FILE,
    LOCAL_VERSION_FILE,
    SOURCE_ENV_VAR,
    VERSION_ENV_VAR,
)
from mnenv.errors import MarkerReadError, NotInstalledError, ResolutionError
from mnenv.models.version import version_key
from mnenv.runtime.config import MnenvConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public data types
# ---------------------------------------------------------------------------

class ResolutionTier(Enum):
    ENVIRONMENT = "environment"
    LOCAL = "local"
    GLOBAL = "global"
    DEFAULT = "default"


@dataclass(frozen=True)
class Resolution:
    value: str
    tier: ResolutionTier
    origin: str | None = None

    def describe(self) -> str:
        """Short "where did this come from" text for the CLI."""
        if self.origin:
            return f"{self.tier.value}: {self.origin}"
        return self.tier.value


@dataclass(frozen=True)
class InstalledVersion:
    version: str
    source: str | None
    path: Path


# ---------------------------------------------------------------------------
# Marker files
# ---------------------------------------------------------------------------

def read_marker(path: Path) -> str | None:
    """Return the trimmed first line of *path*, or None if missing or blank."""
    try:
        text = path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise MarkerReadError(path, exc) from exc
    first_line = text.splitlines()[0] if text else ""
    return first_line.strip() or None


def write_marker(path: Path, value: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{value}\n", encoding="utf-8")
    return path


def find_marker(start: Path, filename: str) -> Path | None:
    """Walk from *start* up to the filesystem root; return the nearest usable marker."""
    for directory in (start, *start.parents):
        candidate = directory / filename
        if candidate.is_file() and read_marker(candidate) is not None:
            return candidate
    return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ContextResolver:
    """Resolves the active version and source from a :class:`MnenvConfig`."""

    def __init__(self, config: MnenvConfig) -> None:
        self.config = config

    def resolve_version(self) -> Resolution:
        """Resolve the active version.

        Raises:
            ResolutionError: If no tier provides a version.
        """
        resolution = self._resolve(VERSION_ENV_VAR, LOCAL_VERSION_FILE, GLOBAL_VERSION_FILE)
        if resolution is None:
            raise ResolutionError("version not set")
        return resolution

    def resolve_source(self) -> Resolution:
        resolution = self._resolve(SOURCE_ENV_VAR, LOCAL_SOURCE_FILE, GLOBAL_SOURCE_FILE)
        return resolution or Resolution(DEFAULT_SOURCE, ResolutionTier.DEFAULT)

    def resolve_current(self) -> tuple[Resolution, Resolution]:
        return self.resolve_version(), self.resolve_source()

    def version_dir(self, version: str) -> Path:
        return self.config.versions_dir / version

    def installed_source(self, version: str) -> str | None:
        return read_marker(self.version_dir(version) / INSTALL_SOURCE_FILE)

    def verify_installed(self, version: str, source: str) -> Path:
        """Check that *version* is installed from *source*; return its directory.

        Raises:
            NotInstalledError: If the version directory is missing, or its
                recorded source differs from *source*.
        """
        directory = self.version_dir(version)
        if not directory.is_dir():
            raise NotInstalledError(
                f"Version {version} is not installed. "
                f"Install it with: mnenv install {version} --source {source}"
            )

        recorded = self.installed_source(version)
        if recorded is not None and recorded != source:
            raise NotInstalledError(
                f"Version {version} is installed from source '{recorded}', not '{source}'. "
                f"Use: mnenv use {version} --source {recorded}, "
                f"or reinstall with: mnenv install {version} --source {source} --force"
            )
        return directory

    def installed(self) -> list[InstalledVersion]:
        """Installed versions in ascending order."""
        versions_dir = self.config.versions_dir
        if not versions_dir.is_dir():
            return []

        entries = []
        for directory in versions_dir.iterdir():
            if not directory.is_dir():
                continue
            try:
                key = version_key(directory.name)
            except ValueError:
                logger.debug("Ignoring non-version directory %s", directory)
                continue
            entries.append((key, InstalledVersion(directory.name, self.installed_source(directory.name), directory)))
        return [entry for _, entry in sorted(entries, key=lambda item: item[0])]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve(self, env_var: str, local_file: str, global_file: str) -> Resolution | None:
        if value := self.config.environ.get(env_var):
            return Resolution(value, ResolutionTier.ENVIRONMENT, env_var)

        marker = find_marker(self.config.cwd.absolute(), local_file)
        if marker is not None:
            return Resolution(read_marker(marker) or "", ResolutionTier.LOCAL, str(marker))

        global_marker = self.config.root / global_file
        if value := read_marker(global_marker):
            return Resolution(value, ResolutionTier.GLOBAL, str(global_marker))

        return None

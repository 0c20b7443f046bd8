"""Exception hierarchy for mnenv.

Every error that reaches the CLI carries a message with an actionable next
step. Commands catch :class:`MnenvError`, print it and exit with status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping


class MnenvError(Exception):
    """Base exception for mnenv errors."""


class ConfigError(MnenvError):
    """Raised when ``config.yaml`` under the mnenv root cannot be parsed."""


class InvalidVersionError(MnenvError, ValueError):
    """Raised when a version string is not a dotted list of integers."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Invalid version '{version}': expected dotted non-negative integers (e.g. 1.14.4)"
        )


class ResolutionError(MnenvError):
    """No active version could be determined for the current context."""

    def __init__(self, message: str = "version not set"):
        super().__init__(
            f"{message}. Set a version with: mnenv global <version> or mnenv local <version>"
        )


class MarkerReadError(MnenvError):
    """A version or source marker exists but cannot be read."""

    def __init__(self, path: Path, reason: object):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}. Fix its permissions or remove it")


class NotInstalledError(MnenvError):
    """The requested version is not installed, or installed from another source."""


class InstallationError(MnenvError):
    """Installing a version failed."""


class DevelopmentToolsMissing(InstallationError):
    """Tools required by the Gemfile installer are not on PATH."""

    def __init__(self, missing: list[str], version: str):
        self.missing = list(missing)
        super().__init__(
            "Development tools required for Gemfile installation.\n"
            f"Missing: {', '.join(self.missing)}\n"
            "Install with: apt-get install ruby bundler build-essential  # Debian/Ubuntu\n"
            "             brew install ruby bundler                       # macOS\n"
            f"Or use: mnenv install {version} --source binary"
        )


class RepositoryPersistenceError(MnenvError):
    """Reading or writing a ``versions.yaml`` store failed."""


class FetchError(MnenvError):
    """A remote listing could not be fetched or parsed."""

    def __init__(self, source: str, message: str, *, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class BatchRefreshError(MnenvError):
    """One or more identities failed during a bulk refresh.

    Raised only after the whole batch was processed; entries that succeeded
    are already persisted.
    """

    def __init__(self, source: str, failures: Mapping[str, str]):
        self.source = source
        self.failures = dict(failures)
        listing = "\n".join(f"  - {label}: {reason}" for label, reason in self.failures.items())
        super().__init__(
            f"Failed to refresh {len(self.failures)} {source} version(s):\n{listing}\n"
            f"Retry a single version with: mnenv {source} update <version>"
        )


class RemoteVersionNotFound(MnenvError):
    """A single-version refresh targeted a version the remote does not list."""

    def __init__(self, source: str, version: str):
        self.source = source
        self.version = version
        super().__init__(
            f"Version {version} not found remotely for {source}. "
            f"Run 'mnenv {source} list' after 'mnenv {source} refresh' to see known versions."
        )


class ExtractionError(MnenvError):
    """Extracting the Gemfile pair from a container image failed."""

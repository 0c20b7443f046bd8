"""Installer contract.

``install`` always runs the same steps:

1. verify prerequisites (tools, remote availability)
2. create ``<root>/versions/<version>``
3. perform the source-specific installation
4. record the source in ``<root>/versions/<version>/source``
5. regenerate shims

If step 3 fails, the directory created in step 2 is removed again.
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from mnenv.core.constants import INSTALL_SOURCE_FILE
from mnenv.errors import InstallationError, MnenvError, NotInstalledError
from mnenv.models.version import parse_version
from mnenv.resolution.resolver import read_marker, write_marker
from mnenv.runtime.config import MnenvConfig
from mnenv.shims.manager import ShimManager

logger = logging.getLogger(__name__)


class Installer(ABC):
    """Installs one version from one source under the mnenv root."""

    source_name: ClassVar[str]

    def __init__(self, version: str, config: MnenvConfig, *, shim_manager: ShimManager | None = None) -> None:
        parse_version(version)
        self.version = version
        self.config = config
        self.shim_manager = shim_manager or ShimManager(config)

    @property
    def version_dir(self) -> Path:
        return self.config.versions_dir / self.version

    def installed(self) -> bool:
        return self.version_dir.is_dir()

    def install(self, *, force: bool = False) -> Path:
        """Run the installation flow and return the version directory.

        Raises:
            InstallationError: If the version is already installed (without
                *force*), a prerequisite is missing, or installation fails.
        """
        if self.installed() and not force:
            recorded = read_marker(self.version_dir / INSTALL_SOURCE_FILE) or "unknown"
            raise InstallationError(
                f"Version {self.version} is already installed (source: {recorded}). "
                f"Reinstall with: mnenv install {self.version} --source {self.source_name} --force"
            )

        self.verify_prerequisites()

        if self.installed():
            logger.info("Removing existing installation of %s", self.version)
            shutil.rmtree(self.version_dir)

        self.version_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.perform_installation()
        except BaseException as exc:
            shutil.rmtree(self.version_dir, ignore_errors=True)
            if isinstance(exc, OSError):
                raise InstallationError(
                    f"Installing {self.version} from {self.source_name} failed: {exc}"
                ) from exc
            raise

        write_marker(self.version_dir / INSTALL_SOURCE_FILE, self.source_name)
        self.shim_manager.regenerate_all()
        logger.info("Installed %s from %s into %s", self.version, self.source_name, self.version_dir)
        return self.version_dir

    @abstractmethod
    def verify_prerequisites(self) -> None:
        """Raise :class:`InstallationError` naming whatever is missing."""

    @abstractmethod
    def perform_installation(self) -> None:
        """Populate :attr:`version_dir`."""


def uninstall(version: str, config: MnenvConfig, *, shim_manager: ShimManager | None = None) -> Path:
    """Remove an installed version and refresh the shims.

    Raises:
        NotInstalledError: If the version is not installed.
    """
    parse_version(version)
    version_dir = config.versions_dir / version
    if not version_dir.is_dir():
        raise NotInstalledError(
            f"Version {version} is not installed. List installed versions with: mnenv versions"
        )
    try:
        shutil.rmtree(version_dir)
    except OSError as exc:
        raise MnenvError(f"Failed to remove {version_dir}: {exc}. Check permissions and retry.") from exc

    (shim_manager or ShimManager(config)).regenerate_all()
    return version_dir

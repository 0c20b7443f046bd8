"""Installer lookup by source name."""

from __future__ import annotations

from typing import Any

from mnenv.core.constants import INSTALL_SOURCES
from mnenv.errors import InstallationError
from mnenv.installers.base import Installer
from mnenv.installers.binary import BinaryInstaller
from mnenv.installers.gemfile import GemfileInstaller
from mnenv.runtime.config import MnenvConfig

INSTALLERS: dict[str, type[Installer]] = {
    GemfileInstaller.source_name: GemfileInstaller,
    BinaryInstaller.source_name: BinaryInstaller,
}


def create_installer(version: str, source: str, config: MnenvConfig, **kwargs: Any) -> Installer:
    """Build the installer for *source*.

    Raises:
        InstallationError: If *source* is not installable.
    """
    try:
        installer_class = INSTALLERS[source]
    except KeyError:
        raise InstallationError(
            f"Unknown source: {source}. Use: {' or '.join(INSTALL_SOURCES)}"
        ) from None
    return installer_class(version, config, **kwargs)

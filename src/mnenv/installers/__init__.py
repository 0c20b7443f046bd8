"""Installers materializing a version under ``<root>/versions``."""

from mnenv.installers.base import Installer, uninstall
from mnenv.installers.binary import BinaryInstaller, detect_platform
from mnenv.installers.factory import INSTALLERS, create_installer
from mnenv.installers.gemfile import GemfileInstaller

__all__ = [
    "BinaryInstaller",
    "GemfileInstaller",
    "INSTALLERS",
    "Installer",
    "create_installer",
    "detect_platform",
    "uninstall",
]

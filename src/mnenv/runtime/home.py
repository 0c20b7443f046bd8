"""mnenv root directory discovery.

The root holds installed versions, shims and the global marker files:

    ~/.mnenv/
      version            global version marker
      source             global source marker
      config.yaml        optional settings
      versions/<v>/      one installation per version
      shims/             generated dispatch scripts
      data/<source>/     persisted version registries
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from mnenv.core.constants import (
    DATA_DIR_ENV_VAR,
    DATA_DIRNAME,
    ROOT_DIRNAME,
    ROOT_ENV_VAR,
    SHIMS_DIRNAME,
    VERSIONS_DIRNAME,
)


def _is_windows() -> bool:
    """Return True when running on Windows."""
    return os.name == "nt"


def get_mnenv_home(environ: Mapping[str, str] | None = None) -> Path:
    """Return the mnenv root directory.

    Resolution order:
    1. MNENV_ROOT environment variable (all platforms)
    2. ~/.mnenv on every platform; on Windows this is
       %USERPROFILE%\\.mnenv, the same default the generated shims use.

    Args:
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Path: Absolute path to the mnenv root.
    """
    env = os.environ if environ is None else environ
    if env_root := env.get(ROOT_ENV_VAR):
        return Path(env_root).expanduser()

    if _is_windows() and (profile := env.get("USERPROFILE")):
        return Path(profile) / ROOT_DIRNAME

    return Path.home() / ROOT_DIRNAME


def get_data_dir(root: Path, environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory holding per-source ``versions.yaml`` stores."""
    env = os.environ if environ is None else environ
    if env_dir := env.get(DATA_DIR_ENV_VAR):
        return Path(env_dir).expanduser()
    return root / DATA_DIRNAME


def versions_dir(root: Path) -> Path:
    return root / VERSIONS_DIRNAME


def shims_dir(root: Path) -> Path:
    return root / SHIMS_DIRNAME

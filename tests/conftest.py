from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from mnenv.runtime.config import MnenvConfig

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def mnenv_root(tmp_path: Path) -> Path:
    root = tmp_path / "mnenv-root"
    root.mkdir()
    return root


@pytest.fixture()
def make_config(tmp_path: Path, mnenv_root: Path) -> Callable[..., MnenvConfig]:
    """Build an isolated config; every path lives under ``tmp_path``."""

    def _make(cwd: Path | None = None, environ: dict[str, str] | None = None, **overrides) -> MnenvConfig:
        work = cwd or tmp_path / "work"
        work.mkdir(parents=True, exist_ok=True)
        values = {
            "root": mnenv_root,
            "data_dir": mnenv_root / "data",
            "cwd": work,
            "environ": dict(environ or {}),
            "clock": fixed_clock,
        }
        values.update(overrides)
        return MnenvConfig(**values)

    return _make


@pytest.fixture()
def config(make_config) -> MnenvConfig:
    return make_config()


@pytest.fixture()
def install_version(mnenv_root: Path) -> Callable[..., Path]:
    """Fake an installed version under ``<root>/versions``."""

    def _install(version: str, source: str | None = "gemfile", executables: tuple[str, ...] = ()) -> Path:
        version_dir = mnenv_root / "versions" / version
        version_dir.mkdir(parents=True, exist_ok=True)
        if source is not None:
            (version_dir / "source").write_text(f"{source}\n", encoding="utf-8")
        for name in executables:
            path = version_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"#!/bin/sh\necho \"{source}-{version} $*\"\n", encoding="utf-8")
            path.chmod(0o755)
        return version_dir

    return _install


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW

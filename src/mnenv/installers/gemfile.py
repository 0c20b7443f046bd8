"""Install a version with bundler from its archived Gemfile pair."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Callable

from mnenv.errors import DevelopmentToolsMissing, InstallationError
from mnenv.installers.base import Installer
from mnenv.registry.gemfile_extractor import GemfileExtractor
from mnenv.registry.sources import GemfileRepository

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("ruby", "bundle")


class GemfileInstaller(Installer):
    source_name = "gemfile"

    def __init__(
        self,
        version,
        config,
        *,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        which: Callable[[str], str | None] = shutil.which,
        **kwargs,
    ) -> None:
        super().__init__(version, config, **kwargs)
        self._run = runner
        self._which = which
        self.repository = GemfileRepository.for_config(config)
        self.extractor = GemfileExtractor(self.repository.data_dir)

    def verify_prerequisites(self) -> None:
        entry = self.repository.find(self.version)
        if entry is None:
            available = ", ".join(v.display_name for v in self.repository.all()) or "none"
            raise InstallationError(
                f"Version {self.version} not found in Gemfile repository. Available: {available}\n"
                f"Refresh the list with: mnenv gemfile refresh"
            )
        if not self.extractor.is_materialized(entry):
            raise InstallationError(
                f"Gemfiles for {self.version} have not been extracted. "
                f"Extract them with: mnenv gemfile update {self.version}"
            )

        missing = [tool for tool in REQUIRED_TOOLS if self._which(tool) is None]
        if missing:
            raise DevelopmentToolsMissing(missing, self.version)

    def perform_installation(self) -> None:
        entry = self.repository.find(self.version)
        if entry is None:
            raise InstallationError(f"Version {self.version} not found")

        shutil.copyfile(self.extractor.gemfile_path(entry), self.version_dir / "Gemfile")
        shutil.copyfile(self.extractor.gemfile_lock_path(entry), self.version_dir / "Gemfile.lock")

        env = {**os.environ, **self.config.environ, "BUNDLE_GEMFILE": str(self.version_dir / "Gemfile")}
        for command in (
            ["bundle", "config", "set", "--local", "path", ".bundle"],
            ["bundle", "install"],
            ["bundle", "binstubs", "--all", "--path", "bin"],
        ):
            logger.info("Running %s", " ".join(command))
            try:
                self._run(command, cwd=self.version_dir, env=env, check=True)
            except subprocess.CalledProcessError as exc:
                raise InstallationError(
                    f"'{' '.join(command)}' failed for {self.version} (exit code {exc.returncode}). "
                    f"Or use: mnenv install {self.version} --source binary"
                ) from exc

"""Install the self-contained binary published on GitHub releases."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from mnenv.core.constants import PRODUCT_NAME
from mnenv.errors import FetchError, InstallationError
from mnenv.fetchers.binary import BinaryReleaseFetcher
from mnenv.fetchers.http import build_http_client, github_auth_headers
from mnenv.installers.base import Installer
from mnenv.models.sources import asset_name_for

logger = logging.getLogger(__name__)


def detect_platform(platform: str | None = None) -> str:
    """Release platform name for the running interpreter.

    Raises:
        InstallationError: On platforms no binary is built for.
    """
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return "linux"
    if platform == "darwin":
        return "macos"
    if platform in {"win32", "cygwin"}:
        return "windows"
    raise InstallationError(
        f"Unsupported platform for binary releases: {platform}. Use: --source gemfile"
    )


class BinaryInstaller(Installer):
    source_name = "binary"

    def __init__(
        self,
        version,
        config,
        *,
        client: httpx.Client | None = None,
        platform: str | None = None,
        console: Console | None = None,
        show_progress: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(version, config, **kwargs)
        self.client = client or build_http_client(config)
        self.platform = platform
        self.console = console or Console(stderr=True)
        self.show_progress = show_progress
        self.fetcher = BinaryReleaseFetcher(self.client, headers=github_auth_headers(config.github_token))

    @property
    def binary_path(self) -> Path:
        suffix = ".exe" if detect_platform(self.platform) == "windows" else ""
        return self.version_dir / f"{PRODUCT_NAME}{suffix}"

    @property
    def asset_name(self) -> str:
        return asset_name_for(detect_platform(self.platform))

    def verify_prerequisites(self) -> None:
        platform = detect_platform(self.platform)
        try:
            release = self.fetcher.fetch_release(self.version)
        except FetchError as exc:
            raise InstallationError(f"Failed to fetch release information: {exc}") from exc

        if release is None:
            raise InstallationError(
                f"Binary version {self.version} not found.\n"
                f"List available versions with: mnenv available binary\n"
                f"Or use: mnenv install {self.version} --source gemfile"
            )
        if release.assets and not release.binary_for_platform(platform):
            raise InstallationError(
                f"Release v{self.version} has no {self.asset_name} asset. "
                f"Available: {', '.join(release.assets)}\n"
                f"Or use: mnenv install {self.version} --source gemfile"
            )

    def perform_installation(self) -> None:
        url = self.fetcher.download_url(self.version, self.asset_name)
        logger.info("Downloading %s", url)
        self._download(url)
        self.binary_path.chmod(0o755)

    def _download(self, url: str) -> None:
        target = self.binary_path
        try:
            with self.client.stream("GET", url, follow_redirects=True) as response:
                if response.status_code != 200:
                    raise InstallationError(
                        f"Download of {url} failed with HTTP {response.status_code}. "
                        f"Or use: mnenv install {self.version} --source gemfile"
                    )
                total_size = int(response.headers.get("content-length", 0))
                with target.open("wb") as handle:
                    if total_size == 0 or not self.show_progress:
                        for chunk in response.iter_bytes(chunk_size=8192):
                            handle.write(chunk)
                        return
                    with Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
                        console=self.console,
                    ) as progress:
                        task = progress.add_task(f"Downloading {self.asset_name}...", total=total_size)
                        downloaded = 0
                        for chunk in response.iter_bytes(chunk_size=8192):
                            handle.write(chunk)
                            downloaded += len(chunk)
                            progress.update(task, completed=downloaded)
        except httpx.HTTPError as exc:
            raise InstallationError(f"Failed to download binary: {exc}") from exc

"""Snap store current heads.

The snap metadata API only answers "what is published right now" for one
channel/architecture pair; it does not serve history. The listing returned
here therefore contains at most one entry per pair, and the refresh
pipeline merges it into the persisted store instead of replacing it.
"""

from __future__ import annotations

import logging

from mnenv.core.constants import PRODUCT_NAME
from mnenv.errors import FetchError
from mnenv.fetchers.base import HttpFetcher
from mnenv.models import SnapVersion
from mnenv.models.version import VERSION_PATTERN, sort_versions

logger = logging.getLogger(__name__)

SNAP_ID = "QkvhpBkFKaDwHMR2LTS3S9Bm0Ek6io11"
METADATA_API_URL = "https://api.snapcraft.io/api/v1/snaps/metadata"

CHANNELS = ("stable", "candidate", "beta", "edge")
ARCHITECTURES = ("amd64", "arm64")


class SnapFetcher(HttpFetcher[SnapVersion]):
    source_name = "snap"

    def __init__(self, client, *, channels=CHANNELS, architectures=ARCHITECTURES, **kwargs) -> None:
        super().__init__(client, **kwargs)
        self.channels = tuple(channels)
        self.architectures = tuple(architectures)

    def fetch_all(self) -> list[SnapVersion]:
        """Fetch the current head of every channel/architecture pair.

        A failing pair is logged and skipped; only when every pair fails is
        the whole fetch reported as failed.
        """
        heads: list[SnapVersion] = []
        errors: list[str] = []

        for channel in self.channels:
            for arch in self.architectures:
                try:
                    head = self._fetch_head(channel, arch)
                except FetchError as exc:
                    logger.warning("Failed to fetch %s/%s: %s", channel, arch, exc)
                    errors.append(f"{channel}/{arch}")
                    continue
                if head is not None:
                    heads.append(head)

        if errors and len(errors) == len(self.channels) * len(self.architectures):
            raise FetchError(self.source_name, f"All snap channel requests failed ({', '.join(errors)})")

        return sort_versions(heads)

    def _fetch_head(self, channel: str, arch: str) -> SnapVersion | None:
        body = {
            "snaps": [{"snap_id": SNAP_ID, "channel": channel, "architecture": arch}],
            "fields": ["version", "revision", "channel", "architecture", "download_url"],
        }
        response = self._request(
            "POST",
            METADATA_API_URL,
            json=body,
            headers={"X-Ubuntu-Series": "16"},
        )
        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(self.source_name, f"Invalid JSON for {channel}/{arch}: {exc}") from exc

        packages = (data.get("_embedded") or {}).get("clickindex:package") or []
        if not packages:
            logger.debug("No %s snap published on %s/%s", PRODUCT_NAME, channel, arch)
            return None

        package = packages[0]
        version = str(package.get("version", ""))
        if not VERSION_PATTERN.match(version):
            self._skip(version)
            return None

        revision = package.get("revision")
        return SnapVersion(
            version=version,
            revision=int(revision) if revision is not None else None,
            arch=arch,
            channel=channel,
        )

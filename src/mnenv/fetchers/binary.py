"""GitHub releases of the self-contained ``packed-mn`` binary."""

from __future__ import annotations

import re
from typing import Any

from mnenv.errors import FetchError
from mnenv.fetchers.base import HttpFetcher
from mnenv.fetchers.http import GITHUB_API
from mnenv.models import BinaryVersion
from mnenv.models.version import parse_timestamp, sort_versions

PACKED_MN_REPO = "metanorma/packed-mn"
RELEASES_URL = f"{GITHUB_API}/repos/{PACKED_MN_REPO}/releases"
DOWNLOAD_URL = f"https://github.com/{PACKED_MN_REPO}/releases/download"
PER_PAGE = 100

TAG_PATTERN = re.compile(r"^v(\d+\.\d+\.\d+)$")


def parse_release(release: dict[str, Any]) -> BinaryVersion | None:
    """Turn one GitHub release payload into a :class:`BinaryVersion`."""
    tag_name = str(release.get("tag_name", ""))
    match = TAG_PATTERN.match(tag_name)
    if not match:
        return None

    return BinaryVersion(
        version=match.group(1),
        published_at=parse_timestamp(release.get("published_at")),
        metadata={
            "tag_name": tag_name,
            "html_url": release.get("html_url"),
            "assets": [asset.get("name") for asset in release.get("assets") or [] if asset.get("name")],
        },
    )


class BinaryReleaseFetcher(HttpFetcher[BinaryVersion]):
    source_name = "binary"

    def fetch_all(self) -> list[BinaryVersion]:
        versions: list[BinaryVersion] = []
        page = 1

        while True:
            releases = self._get_json(RELEASES_URL, params={"per_page": PER_PAGE, "page": page})
            if not releases:
                break
            for release in releases:
                if release.get("draft"):
                    continue
                version = parse_release(release)
                if version is None:
                    self._skip(str(release.get("tag_name", "")))
                    continue
                versions.append(version)
            page += 1

        return sort_versions(versions)

    def fetch_release(self, version: str) -> BinaryVersion | None:
        """Look up a single release by version; ``None`` when it does not exist."""
        try:
            release = self._get_json(f"{RELEASES_URL}/tags/v{version}")
        except FetchError as exc:
            if exc.status_code == 404:
                return None
            raise
        return parse_release(release)

    @staticmethod
    def download_url(version: str, asset_name: str) -> str:
        return f"{DOWNLOAD_URL}/v{version}/{asset_name}"

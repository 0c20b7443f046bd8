"""Tags of the ``metanorma/homebrew-metanorma`` tap."""

from __future__ import annotations

import re

from mnenv.fetchers.base import HttpFetcher
from mnenv.fetchers.http import GITHUB_API
from mnenv.models import HomebrewVersion
from mnenv.models.version import sort_versions

TAP_REPO = "metanorma/homebrew-metanorma"
TAGS_URL = f"{GITHUB_API}/repos/{TAP_REPO}/tags"
PER_PAGE = 100

TAG_PATTERN = re.compile(r"^v(\d+\.\d+\.\d+)$")


class HomebrewFetcher(HttpFetcher[HomebrewVersion]):
    source_name = "homebrew"

    def fetch_all(self) -> list[HomebrewVersion]:
        versions: list[HomebrewVersion] = []
        page = 1

        while True:
            tags = self._get_json(TAGS_URL, params={"per_page": PER_PAGE, "page": page})
            if not tags:
                break
            for tag in tags:
                name = str(tag.get("name", ""))
                match = TAG_PATTERN.match(name)
                if not match:
                    self._skip(name)
                    continue
                versions.append(
                    HomebrewVersion(
                        version=match.group(1),
                        tag_name=name,
                        commit_sha=(tag.get("commit") or {}).get("sha"),
                    )
                )
            page += 1

        return sort_versions(versions)

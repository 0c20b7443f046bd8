"""Docker Hub tags of the ``metanorma/metanorma`` image."""

from __future__ import annotations

from mnenv.fetchers.base import RELEASE_NUMBER, HttpFetcher
from mnenv.models import GemfileVersion
from mnenv.models.version import parse_timestamp, sort_versions

DOCKER_IMAGE = "metanorma/metanorma"
TAGS_URL = f"https://registry.hub.docker.com/v2/repositories/{DOCKER_IMAGE}/tags"
PAGE_SIZE = 100


class DockerHubFetcher(HttpFetcher[GemfileVersion]):
    """Lists release tags; each tag is a candidate for Gemfile extraction."""

    source_name = "gemfile"

    def fetch_all(self) -> list[GemfileVersion]:
        url: str | None = f"{TAGS_URL}?page_size={PAGE_SIZE}"
        versions: list[GemfileVersion] = []

        while url:
            data = self._get_json(url)
            for result in data.get("results") or []:
                name = str(result.get("name", ""))
                if not RELEASE_NUMBER.match(name):
                    self._skip(name)
                    continue
                versions.append(
                    GemfileVersion(
                        version=name,
                        published_at=parse_timestamp(result.get("tag_last_pushed")),
                    )
                )
            url = data.get("next")

        return sort_versions(versions)

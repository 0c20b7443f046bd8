"""Remote listings for every release channel."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mnenv.fetchers.base import Fetcher, HttpFetcher
from mnenv.fetchers.binary import BinaryReleaseFetcher
from mnenv.fetchers.chocolatey import ChocolateyFetcher
from mnenv.fetchers.gemfile import DockerHubFetcher
from mnenv.fetchers.homebrew import HomebrewFetcher
from mnenv.fetchers.http import build_http_client, github_auth_headers
from mnenv.fetchers.snap import SnapFetcher

if TYPE_CHECKING:
    import httpx

    from mnenv.runtime.config import MnenvConfig

FETCHERS: dict[str, type[HttpFetcher]] = {
    fetcher.source_name: fetcher
    for fetcher in (
        DockerHubFetcher,
        SnapFetcher,
        HomebrewFetcher,
        ChocolateyFetcher,
        BinaryReleaseFetcher,
    )
}

# Sources served by api.github.com, where a token lifts the rate limit.
GITHUB_SOURCES = frozenset({"homebrew", "binary"})


def create_fetcher(source_name: str, client: httpx.Client, config: MnenvConfig) -> HttpFetcher:
    """Build the fetcher for *source_name* on top of a shared client.

    Raises:
        KeyError: If the source is unknown.
    """
    try:
        fetcher_class = FETCHERS[source_name]
    except KeyError:
        raise KeyError(f"Unknown source '{source_name}'. Available: {', '.join(FETCHERS)}") from None

    headers = github_auth_headers(config.github_token) if source_name in GITHUB_SOURCES else {}
    return fetcher_class(client, headers=headers)


__all__ = [
    "BinaryReleaseFetcher",
    "ChocolateyFetcher",
    "DockerHubFetcher",
    "FETCHERS",
    "Fetcher",
    "HomebrewFetcher",
    "HttpFetcher",
    "SnapFetcher",
    "build_http_client",
    "create_fetcher",
    "github_auth_headers",
]

"""Shared HTTP client construction for the release fetchers and installers."""

from __future__ import annotations

import ssl

import httpx
import truststore

from mnenv.runtime.config import MnenvConfig

GITHUB_API = "https://api.github.com"


def github_auth_headers(token: str | None) -> dict[str, str]:
    """Return an Authorization header dict only when a non-empty token exists."""
    return {"Authorization": f"Bearer {token}"} if token else {}


def build_http_client(config: MnenvConfig) -> httpx.Client:
    """Create the client used for every remote call of one invocation.

    Uses the operating system trust store so corporate proxies with custom
    roots keep working.
    """
    from mnenv import __version__

    ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    return httpx.Client(
        verify=ssl_context,
        timeout=config.http_timeout,
        follow_redirects=True,
        headers={"User-Agent": f"mnenv/{__version__}"},
    )

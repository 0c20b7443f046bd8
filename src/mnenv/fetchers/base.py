"""Fetcher contract and the shared HTTP plumbing.

A fetcher returns the remote listing of one source as version entities in
ascending order. Network and parse failures surface as
:class:`~mnenv.errors.FetchError`; pagination is sequential and stops on the
remote's "next page" signal.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Protocol, TypeVar

import httpx

from mnenv.errors import FetchError
from mnenv.models.version import ArtifactVersion

logger = logging.getLogger(__name__)

# Three-component release numbers; anything else is a floating or pre-release tag.
RELEASE_NUMBER = re.compile(r"^\d+\.\d+\.\d+$")

V = TypeVar("V", bound=ArtifactVersion)
V_co = TypeVar("V_co", bound=ArtifactVersion, covariant=True)


class Fetcher(Protocol[V_co]):
    """Anything that can list the versions a remote channel currently offers."""

    source_name: str

    def fetch_all(self) -> list[V_co]: ...


class HttpFetcher(ABC, Generic[V]):
    """Base class for fetchers talking JSON/XML over HTTP."""

    source_name: ClassVar[str]

    def __init__(self, client: httpx.Client, *, headers: dict[str, str] | None = None) -> None:
        self.client = client
        self.headers = dict(headers or {})

    @abstractmethod
    def fetch_all(self) -> list[V]:
        """Return every release the remote lists, oldest first."""

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            response = self.client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                self.source_name,
                f"{method} {url} returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(self.source_name, f"{method} {url} failed: {exc}") from exc
        return response

    def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = self._request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(
                self.source_name,
                f"Invalid JSON from {url}: {exc} (body starts with {response.text[:200]!r})",
            ) from exc

    def _skip(self, name: str) -> None:
        logger.debug("Skipping %s tag %r (not a release number)", self.source_name, name)

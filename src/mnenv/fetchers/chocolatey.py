"""Chocolatey community feed (OData v2, Atom XML)."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from mnenv.core.constants import PRODUCT_NAME
from mnenv.errors import FetchError
from mnenv.fetchers.base import HttpFetcher
from mnenv.models import ChocolateyVersion
from mnenv.models.version import VERSION_PATTERN, parse_timestamp, sort_versions

API_URL = "https://community.chocolatey.org/api/v2"


class ChocolateyFetcher(HttpFetcher[ChocolateyVersion]):
    source_name = "chocolatey"

    def __init__(self, client, *, package_name: str = PRODUCT_NAME, **kwargs) -> None:
        super().__init__(client, **kwargs)
        self.package_name = package_name

    def fetch_all(self) -> list[ChocolateyVersion]:
        url: str | None = f"{API_URL}/Packages()?%24filter=Id%20eq%20'{self.package_name}'"
        versions: list[ChocolateyVersion] = []

        while url:
            response = self._request("GET", url)
            try:
                feed = ET.fromstring(response.content)
            except ET.ParseError as exc:
                raise FetchError(self.source_name, f"Invalid feed XML from {url}: {exc}") from exc

            versions.extend(self._parse_entries(feed))
            url = self._next_link(feed)

        return sort_versions(versions)

    def _parse_entries(self, feed: ET.Element) -> list[ChocolateyVersion]:
        entries: list[ChocolateyVersion] = []
        for entry in feed.iterfind("{*}entry"):
            properties = entry.find(".//{*}properties")
            if properties is None:
                continue
            version = (properties.findtext("{*}Version") or "").strip()
            if not version:
                continue
            if not VERSION_PATTERN.match(version):
                self._skip(version)
                continue
            entries.append(
                ChocolateyVersion(
                    version=version,
                    published_at=parse_timestamp(properties.findtext("{*}Published")),
                    package_name=self.package_name,
                    is_pre_release=(properties.findtext("{*}IsPrerelease") or "").strip() == "true",
                )
            )
        return entries

    @staticmethod
    def _next_link(feed: ET.Element) -> str | None:
        for link in feed.findall("{*}link"):
            if link.get("rel") != "next":
                continue
            href = link.get("href")
            if not href:
                return None
            if not href.startswith("http"):
                href = f"{API_URL}/{href}"
            return href.replace("http://", "https://", 1)
        return None

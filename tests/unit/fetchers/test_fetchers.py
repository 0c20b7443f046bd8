"""Remote listings parsed from mocked HTTP responses."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from mnenv.errors import FetchError
from mnenv.fetchers import (
    BinaryReleaseFetcher,
    ChocolateyFetcher,
    DockerHubFetcher,
    HttpFetcher,
    HomebrewFetcher,
    SnapFetcher,
    create_fetcher,
    github_auth_headers,
)
from mnenv.fetchers.gemfile import TAGS_URL as DOCKER_TAGS_URL


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestDockerHubFetcher:
    def test_follows_next_and_filters_tags(self) -> None:
        page2 = "https://registry.hub.docker.com/v2/repositories/metanorma/metanorma/tags?page=2"

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == page2:
                return httpx.Response(200, json={"results": [{"name": "1.9.0"}], "next": None})
            assert str(request.url).startswith(DOCKER_TAGS_URL)
            return httpx.Response(
                200,
                json={
                    "results": [
                        {"name": "latest"},
                        {"name": "1.10.0", "tag_last_pushed": "2024-05-01T10:00:00.123456Z"},
                        {"name": "1.10.0-dev"},
                    ],
                    "next": page2,
                },
            )

        versions = DockerHubFetcher(_client(handler)).fetch_all()

        assert [v.version for v in versions] == ["1.9.0", "1.10.0"]
        assert versions[1].published_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_http_error(self) -> None:
        fetcher = DockerHubFetcher(_client(lambda request: httpx.Response(500)))

        with pytest.raises(FetchError, match="returned 500") as excinfo:
            fetcher.fetch_all()
        assert excinfo.value.status_code == 500

    def test_invalid_json(self) -> None:
        fetcher = DockerHubFetcher(_client(lambda request: httpx.Response(200, text="<html>")))

        with pytest.raises(FetchError, match="Invalid JSON"):
            fetcher.fetch_all()


class TestHomebrewFetcher:
    def test_pages_until_empty(self) -> None:
        pages = {
            "1": [{"name": "v1.2.0", "commit": {"sha": "aaa"}}, {"name": "nightly"}],
            "2": [{"name": "v1.1.0", "commit": {"sha": "bbb"}}],
        }

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["per_page"] == "100"
            return httpx.Response(200, json=pages.get(request.url.params["page"], []))

        versions = HomebrewFetcher(_client(handler)).fetch_all()

        assert [(v.version, v.tag_name, v.commit_sha) for v in versions] == [
            ("1.1.0", "v1.1.0", "bbb"),
            ("1.2.0", "v1.2.0", "aaa"),
        ]


class TestBinaryReleaseFetcher:
    def test_skips_drafts_and_odd_tags(self) -> None:
        releases = [
            {"tag_name": "v1.2.3", "published_at": "2024-02-02T00:00:00Z", "html_url": "https://x", "assets": [{"name": "metanorma-linux"}]},
            {"tag_name": "v1.3.0", "draft": True},
            {"tag_name": "nightly-2024"},
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=releases if request.url.params["page"] == "1" else [])

        versions = BinaryReleaseFetcher(_client(handler)).fetch_all()

        assert [v.version for v in versions] == ["1.2.3"]
        assert versions[0].metadata == {"tag_name": "v1.2.3", "html_url": "https://x", "assets": ["metanorma-linux"]}

    def test_fetch_release_not_found(self) -> None:
        fetcher = BinaryReleaseFetcher(_client(lambda request: httpx.Response(404, json={})))
        assert fetcher.fetch_release("9.9.9") is None

    def test_fetch_release_server_error(self) -> None:
        fetcher = BinaryReleaseFetcher(_client(lambda request: httpx.Response(502)))
        with pytest.raises(FetchError):
            fetcher.fetch_release("1.2.3")

    def test_download_url(self) -> None:
        assert BinaryReleaseFetcher.download_url("1.2.3", "metanorma-macos") == (
            "https://github.com/metanorma/packed-mn/releases/download/v1.2.3/metanorma-macos"
        )


def _snap_package(version: str, revision: int) -> dict:
    return {"_embedded": {"clickindex:package": [{"version": version, "revision": revision}]}}


class TestSnapFetcher:
    def test_one_head_per_channel_and_arch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.headers["X-Ubuntu-Series"] == "16"
            query = json.loads(request.content)["snaps"][0]
            if query["channel"] == "edge":
                return httpx.Response(200, json={"_embedded": {"clickindex:package": []}})
            revision = 10 if query["architecture"] == "amd64" else 11
            return httpx.Response(200, json=_snap_package("1.2.3", revision))

        versions = SnapFetcher(_client(handler), channels=("stable", "edge")).fetch_all()

        assert {(v.revision, v.arch, v.channel) for v in versions} == {(10, "amd64", "stable"), (11, "arm64", "stable")}

    def test_partial_failure_tolerated(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            query = json.loads(request.content)["snaps"][0]
            if query["architecture"] == "arm64":
                return httpx.Response(503)
            return httpx.Response(200, json=_snap_package("1.2.3", 10))

        versions = SnapFetcher(_client(handler), channels=("stable",)).fetch_all()

        assert [v.arch for v in versions] == ["amd64"]

    def test_total_failure_raises(self) -> None:
        fetcher = SnapFetcher(_client(lambda request: httpx.Response(503)), channels=("stable",))

        with pytest.raises(FetchError, match="All snap channel requests failed"):
            fetcher.fetch_all()


FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:d="http://schemas.microsoft.com/ado/2007/08/dataservices"
      xmlns:m="http://schemas.microsoft.com/ado/2007/08/dataservices/metadata">
  {entries}
  {next_link}
</feed>"""

ENTRY = """<entry><m:properties>
  <d:Version>{version}</d:Version>
  <d:Published m:type="Edm.DateTime">2024-03-01T08:00:00</d:Published>
  <d:IsPrerelease m:type="Edm.Boolean">{pre}</d:IsPrerelease>
</m:properties></entry>"""


class TestChocolateyFetcher:
    def test_parses_feed_and_follows_next(self) -> None:
        next_href = "http://community.chocolatey.org/api/v2/Packages?$skiptoken='metanorma','1.1.0'"

        def handler(request: httpx.Request) -> httpx.Response:
            if "skiptoken" in str(request.url):
                assert request.url.scheme == "https"
                body = FEED.format(entries=ENTRY.format(version="1.2.0-beta", pre="true"), next_link="")
            else:
                body = FEED.format(
                    entries=ENTRY.format(version="1.1.0", pre="false") + ENTRY.format(version="1.0.0", pre="true"),
                    next_link=f'<link rel="next" href="{next_href}"/>',
                )
            return httpx.Response(200, content=body.encode("utf-8"))

        versions = ChocolateyFetcher(_client(handler)).fetch_all()

        assert [(v.version, v.is_pre_release) for v in versions] == [("1.0.0", True), ("1.1.0", False)]
        assert versions[0].published_at == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

    def test_single_entry_feed(self) -> None:
        body = FEED.format(entries=ENTRY.format(version="1.14.4", pre="false"), next_link="")
        fetcher = ChocolateyFetcher(_client(lambda request: httpx.Response(200, content=body.encode("utf-8"))))

        assert [v.version for v in fetcher.fetch_all()] == ["1.14.4"]

    def test_invalid_xml(self) -> None:
        fetcher = ChocolateyFetcher(_client(lambda request: httpx.Response(200, content=b"not xml")))

        with pytest.raises(FetchError, match="Invalid feed XML"):
            fetcher.fetch_all()


class TestCreateFetcher:
    def test_github_sources_get_token(self, make_config) -> None:
        config = make_config(github_token="tok")
        client = _client(lambda request: httpx.Response(200, json=[]))

        assert create_fetcher("binary", client, config).headers == {"Authorization": "Bearer tok"}
        assert create_fetcher("gemfile", client, config).headers == {}

    def test_unknown_source(self, config) -> None:
        with pytest.raises(KeyError):
            create_fetcher("apt", _client(lambda request: httpx.Response(200)), config)

    def test_blank_token_sends_no_header(self) -> None:
        assert github_auth_headers(None) == {}
        assert github_auth_headers("") == {}

    def test_http_fetcher_is_abstract(self) -> None:
        with pytest.raises(TypeError, match="fetch_all"):
            HttpFetcher(_client(lambda request: httpx.Response(200)))

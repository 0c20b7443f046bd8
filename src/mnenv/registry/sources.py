"""Concrete repositories, one per release channel."""

from __future__ import annotations

from typing import Hashable

from mnenv.models import (
    BinaryVersion,
    ChocolateyVersion,
    GemfileVersion,
    HomebrewVersion,
    SnapVersion,
)
from mnenv.models.version import sort_versions
from mnenv.registry.repository import Repository


class GemfileRepository(Repository[GemfileVersion]):
    source_name = "gemfile"
    version_class = GemfileVersion


class HomebrewRepository(Repository[HomebrewVersion]):
    source_name = "homebrew"
    version_class = HomebrewVersion


class ChocolateyRepository(Repository[ChocolateyVersion]):
    source_name = "chocolatey"
    version_class = ChocolateyVersion


class BinaryRepository(Repository[BinaryVersion]):
    source_name = "binary"
    version_class = BinaryVersion


class SnapRepository(Repository[SnapVersion]):
    """Composite-key repository for Snap store entries.

    Entries are keyed by ``(version, revision, arch, channel)``. ``find`` and
    ``exists`` stay coarse (version only) for callers that only know a
    version number; :meth:`find_exact` addresses a single entry.
    """

    source_name = "snap"
    version_class = SnapVersion

    def identity_of(self, version: SnapVersion) -> Hashable:
        return (version.version, version.revision, version.arch, version.channel)

    def label_of(self, identity: Hashable) -> str:
        if isinstance(identity, tuple) and len(identity) == 4:
            version, revision, arch, channel = identity
            return f"{version} (revision {revision}, {arch}/{channel})"
        return str(identity)

    def find(self, identity: Hashable) -> SnapVersion | None:
        if isinstance(identity, tuple):
            return self._versions.get(identity)
        return next((v for v in self.all() if v.version == identity), None)

    def find_exact(self, version: str, revision: int | None, arch: str, channel: str) -> SnapVersion | None:
        return self._versions.get((version, revision, arch, channel))

    def find_all_by_version(self, version: str) -> list[SnapVersion]:
        return sort_versions(v for v in self._versions.values() if v.version == version)

    def exists(self, identity: Hashable) -> bool:
        if isinstance(identity, tuple):
            return identity in self._versions
        return any(v.version == identity for v in self._versions.values())


REPOSITORIES: dict[str, type[Repository]] = {
    repo.source_name: repo
    for repo in (
        GemfileRepository,
        SnapRepository,
        HomebrewRepository,
        ChocolateyRepository,
        BinaryRepository,
    )
}


def repository_class(source_name: str) -> type[Repository]:
    """Return the repository class for *source_name*.

    Raises:
        KeyError: If the source is unknown.
    """
    try:
        return REPOSITORIES[source_name]
    except KeyError:
        raise KeyError(
            f"Unknown source '{source_name}'. Available: {', '.join(REPOSITORIES)}"
        ) from None

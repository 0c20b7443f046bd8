"""Refresh strategies on top of a repository.

Three ways to bring a repository in line with its remote listing:

- incremental: record only identities that are missing locally (or whose
  artifacts are missing on disk);
- replace: re-materialize every remote entry of one version, failing fast;
- revamp: re-materialize every remote entry. Sources whose fetch only sees
  current heads keep every stored entry the fetch no longer returns.

Bulk strategies keep going when one identity fails and raise
:class:`~mnenv.errors.BatchRefreshError` once the batch is done; the
entries that succeeded are already persisted at that point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Callable, Generic, Hashable, Iterable, Protocol, TypeVar

from mnenv.errors import BatchRefreshError, MnenvError, RemoteVersionNotFound
from mnenv.fetchers.base import Fetcher
from mnenv.models.version import ArtifactVersion, parse_version, sort_versions
from mnenv.registry.repository import Repository

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=ArtifactVersion)


class RefreshMode(StrEnum):
    INCREMENTAL = "incremental"
    REPLACE = "replace"
    REVAMP = "revamp"


class Materializer(Protocol[V]):
    """Produces (and removes) the on-disk artifacts of a version entry."""

    def is_materialized(self, version: V) -> bool: ...

    def materialize(self, version: V) -> V: ...

    def remove(self, version: V) -> None: ...


class RecordOnlyMaterializer(Generic[V]):
    """For sources whose entries are plain records with nothing on disk."""

    def is_materialized(self, version: V) -> bool:
        return True

    def materialize(self, version: V) -> V:
        return version

    def remove(self, version: V) -> None:
        return None


@dataclass
class RefreshReport:
    """Outcome of one refresh run."""

    source: str
    mode: RefreshMode
    remote_count: int = 0
    recorded: list[str] = field(default_factory=list)
    preserved: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise BatchRefreshError(self.source, self.failures)


def merge_current_heads(
    existing: Iterable[V],
    current: Iterable[V],
    key: Callable[[V], Hashable] = lambda v: v.identity,
) -> list[V]:
    """Overlay *current* on *existing* by identity key.

    Every key of *current* ends up with the current value; every existing
    key that *current* does not mention is kept as is. The result is in
    ascending version order.
    """
    merged: dict[Hashable, V] = {key(v): v for v in existing}
    for version in current:
        merged[key(version)] = version
    return sort_versions(merged.values())


class RefreshPipeline(Generic[V]):
    """Runs one refresh strategy for one source."""

    def __init__(
        self,
        repository: Repository[V],
        fetcher: Fetcher[V],
        materializer: Materializer[V] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repository = repository
        self.fetcher = fetcher
        self.materializer: Materializer[V] = materializer or RecordOnlyMaterializer()
        self._clock = clock or repository.clock

    @property
    def source_name(self) -> str:
        return self.repository.source_name

    def run(self, mode: RefreshMode | str, target_version: str | None = None) -> RefreshReport:
        mode = RefreshMode(mode)
        if mode is RefreshMode.REPLACE:
            if not target_version:
                raise ValueError("target_version is required for replace mode")
            return self.replace(target_version)
        if mode is RefreshMode.REVAMP:
            return self.revamp()
        return self.incremental()

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def incremental(self) -> RefreshReport:
        remote = self.fetcher.fetch_all()
        report = RefreshReport(self.source_name, RefreshMode.INCREMENTAL, remote_count=len(remote))

        existing = {
            self.repository.identity_of(v)
            for v in self.repository.all()
            if self.materializer.is_materialized(v)
        }
        missing = [v for v in remote if self.repository.identity_of(v) not in existing]
        logger.info("Found %d new %s versions", len(missing), self.source_name)

        for version in missing:
            label = self._label(version)
            try:
                self._record(version)
            except (MnenvError, OSError) as exc:
                logger.warning("Failed to refresh %s %s: %s", self.source_name, label, exc)
                report.failures[label] = str(exc)
                continue
            report.recorded.append(label)

        report.raise_for_failures()
        return report

    def replace(self, target_version: str) -> RefreshReport:
        parse_version(target_version)
        remote = [v for v in self.fetcher.fetch_all() if v.version == target_version]
        if not remote:
            raise RemoteVersionNotFound(self.source_name, target_version)

        report = RefreshReport(self.source_name, RefreshMode.REPLACE, remote_count=len(remote))

        for local in self.repository.all():
            if local.version == target_version:
                self.materializer.remove(local)
                logger.info("Removed existing artifacts for %s", self._label(local))

        for version in remote:
            self._record(version)
            report.recorded.append(self._label(version))
        return report

    def revamp(self) -> RefreshReport:
        remote = self.fetcher.fetch_all()
        report = RefreshReport(self.source_name, RefreshMode.REVAMP, remote_count=len(remote))
        logger.info("Re-materializing %d %s versions", len(remote), self.source_name)

        existing = self.repository.all()
        current: list[V] = []
        for version in remote:
            label = self._label(version)
            try:
                current.append(self._prepare(version))
            except (MnenvError, OSError) as exc:
                logger.warning("Failed to refresh %s %s: %s", self.source_name, label, exc)
                report.failures[label] = str(exc)
                continue
            report.recorded.append(label)

        merged = merge_current_heads(existing, current, key=self.repository.identity_of)
        current_keys = {self.repository.identity_of(v) for v in current}
        report.preserved = sum(1 for v in existing if self.repository.identity_of(v) not in current_keys)
        self.repository.save_all(merged)

        report.raise_for_failures()
        return report

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _label(self, version: V) -> str:
        return self.repository.label_of(self.repository.identity_of(version))

    def _prepare(self, remote: V) -> V:
        """Materialize *remote* and stamp it; keeps a known ``published_at``."""
        previous = self.repository.find(self.repository.identity_of(remote))
        materialized = self.materializer.materialize(remote)
        published_at = remote.published_at or (previous.published_at if previous else None)
        return materialized.with_timestamps(published_at=published_at, parsed_at=self._clock())

    def _record(self, remote: V) -> V:
        version = self._prepare(remote)
        self.repository.save(version)
        return version

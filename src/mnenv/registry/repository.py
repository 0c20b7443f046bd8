"""YAML-backed version repository.

One repository holds the known versions of one source. The store is loaded
eagerly on construction, kept in memory, and rewritten wholesale on every
``save``/``save_all``:

    <data_dir>/versions.yaml
      metadata:   generated_at, source, count, latest_version (derived)
      versions:   ascending list of version entries

Writes are plain whole-file rewrites (no temp-file rename, no locking); a
crash mid-write can leave a truncated store behind.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Generic, Hashable, Iterable, TypeVar

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from mnenv.errors import MnenvError, RepositoryPersistenceError
from mnenv.models.version import ArtifactVersion, format_timestamp, sort_versions
from mnenv.runtime.config import utc_now

if TYPE_CHECKING:
    from datetime import datetime

    from mnenv.runtime.config import MnenvConfig

logger = logging.getLogger(__name__)

VERSIONS_FILENAME = "versions.yaml"

V = TypeVar("V", bound=ArtifactVersion)
R = TypeVar("R", bound="Repository[Any]")


def _yaml() -> YAML:
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.width = 4096
    return yaml


class Repository(Generic[V]):
    """Keyed store of version entities for one source.

    Subclasses set :attr:`source_name` and :attr:`version_class`; sources
    whose entries are not unique per version override :meth:`identity_of`.
    """

    source_name: ClassVar[str]
    version_class: ClassVar[type[ArtifactVersion]]

    def __init__(self, data_dir: Path, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.data_dir = data_dir
        self.versions_file_path = data_dir / VERSIONS_FILENAME
        self._clock = clock
        self._versions: dict[Hashable, V] = {}
        if self.versions_file_path.is_file():
            self._load()

    @property
    def clock(self) -> Callable[[], datetime]:
        return self._clock

    @classmethod
    def for_config(cls: type[R], config: MnenvConfig) -> R:
        """Open the repository stored under ``<data_dir>/<source_name>``."""
        return cls(config.source_data_dir(cls.source_name), clock=config.clock)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def identity_of(self, version: V) -> Hashable:
        return version.identity

    def label_of(self, identity: Hashable) -> str:
        """Human-readable rendering of an identity key for messages."""
        return str(identity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, identity: Hashable) -> V | None:
        return self._versions.get(identity)

    def all(self) -> list[V]:
        return sort_versions(self._versions.values())

    def latest(self) -> V | None:
        versions = self.all()
        return versions[-1] if versions else None

    def count(self) -> int:
        return len(self._versions)

    def exists(self, identity: Hashable) -> bool:
        return identity in self._versions

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, version: V) -> None:
        self._versions[self.identity_of(version)] = version
        self._persist()

    def save_all(self, versions: Iterable[V]) -> None:
        for version in versions:
            self._versions[self.identity_of(version)] = version
        self._persist()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def metadata(self) -> dict[str, Any]:
        latest = self.latest()
        return {
            "generated_at": format_timestamp(self._clock()),
            "source": self.source_name,
            "count": self.count(),
            "latest_version": latest.version if latest else None,
        }

    def _load(self) -> None:
        try:
            with self.versions_file_path.open("r", encoding="utf-8") as handle:
                payload = _yaml().load(handle)
        except (YAMLError, OSError) as exc:
            raise RepositoryPersistenceError(
                f"Failed to read {self.versions_file_path}: {exc}. "
                f"Run 'mnenv {self.source_name} revamp' to rebuild it."
            ) from exc

        if not isinstance(payload, dict):
            return
        entries = payload.get("versions") or []

        for index, entry in enumerate(entries, start=1):
            try:
                version = self.version_class.from_dict(dict(entry))
            except (KeyError, TypeError, ValueError, MnenvError) as exc:
                raise RepositoryPersistenceError(
                    f"Invalid entry #{index} in {self.versions_file_path}: {exc}"
                ) from exc
            self._versions[self.identity_of(version)] = version  # type: ignore[assignment]

        logger.debug("Loaded %d %s versions from %s", len(self._versions), self.source_name, self.versions_file_path)

    def _persist(self) -> None:
        payload = {
            "metadata": self.metadata(),
            "versions": [version.to_dict() for version in self.all()],
        }
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with self.versions_file_path.open("w", encoding="utf-8") as handle:
                _yaml().dump(payload, handle)
        except OSError as exc:
            raise RepositoryPersistenceError(
                f"Failed to write {self.versions_file_path}: {exc}. Check permissions on {self.data_dir}."
            ) from exc

        logger.debug("Persisted %d %s versions to %s", self.count(), self.source_name, self.versions_file_path)

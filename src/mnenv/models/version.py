"""Base version entity and the dotted-numeric ordering shared by all sources.

Versions are plain dotted non-negative integers ("1.14.4"). Missing trailing
components compare as zero, so "1.2" and "1.2.0" order as equal. Anything
else (pre-release suffixes, build metadata) is rejected with
:class:`~mnenv.errors.InvalidVersionError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, ClassVar, Hashable, Iterable, TypeVar

from mnenv.core.constants import TIMESTAMP_FORMAT
from mnenv.errors import InvalidVersionError

VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*$")

# Historical name of ``published_at`` in stores written by older releases.
LEGACY_PUBLISHED_FIELD = "updated_at"

V = TypeVar("V", bound="ArtifactVersion")


def parse_version(version: str) -> tuple[int, ...]:
    """Split a dotted version into its integer components.

    Raises:
        InvalidVersionError: If any component is not a non-negative integer.
    """
    if not isinstance(version, str) or not VERSION_PATTERN.match(version):
        raise InvalidVersionError(str(version))
    return tuple(int(part) for part in version.split("."))


def version_key(version: str) -> tuple[int, ...]:
    """Sort key for a version string.

    Trailing zero components are dropped, which makes plain tuple comparison
    identical to comparing the zero-padded component lists.
    """
    parts = list(parse_version(version))
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 comparing two version strings component-wise."""
    a, b = version_key(left), version_key(right)
    return (a > b) - (a < b)


def sort_versions(versions: Iterable[V]) -> list[V]:
    """Return *versions* in ascending order; equal versions keep their input order."""
    return sorted(versions, key=lambda v: version_key(v.version))


def format_timestamp(value: datetime | None) -> str | None:
    """Serialize a timestamp as ``YYYY-MM-DDTHH:MM:SSZ`` (UTC)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a persisted or remote timestamp into an aware UTC datetime.

    Accepts ``None``, ``datetime`` objects (YAML loaders may already have
    resolved them) and ISO 8601 strings, with or without a trailing ``Z``.
    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class ArtifactVersion:
    """A release known to mnenv, independent of the channel it came from.

    Subclasses add per-source attributes through :meth:`extra_fields` and
    :meth:`_extra_from_dict`; repositories only use this interface and
    :attr:`identity`, never the concrete type.
    """

    version: str
    published_at: datetime | None = None
    parsed_at: datetime | None = None

    BASE_FIELDS: ClassVar[tuple[str, ...]] = ("version", "published_at", "parsed_at")

    def __post_init__(self) -> None:
        parse_version(self.version)

    @property
    def parts(self) -> tuple[int, ...]:
        return parse_version(self.version)

    @property
    def display_name(self) -> str:
        return f"v{self.version}"

    @property
    def identity(self) -> Hashable:
        """Key addressing this entry inside its repository."""
        return self.version

    def extra_fields(self) -> dict[str, Any]:
        """Source-specific attributes, in persisted form."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "published_at": format_timestamp(self.published_at),
            "parsed_at": format_timestamp(self.parsed_at),
        }
        data.update(self.extra_fields())
        return data

    @classmethod
    def from_dict(cls: type[V], data: dict[str, Any]) -> V:
        published = data.get("published_at")
        if published is None:
            published = data.get(LEGACY_PUBLISHED_FIELD)

        return cls(
            version=str(data["version"]),
            published_at=parse_timestamp(published),
            parsed_at=parse_timestamp(data.get("parsed_at")),
            **cls._extra_from_dict(data),
        )

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {}

    def with_timestamps(
        self: V,
        *,
        published_at: datetime | None = None,
        parsed_at: datetime | None = None,
    ) -> V:
        """Return a copy with the given timestamps filled in.

        ``None`` leaves the current value untouched.
        """
        changes: dict[str, Any] = {}
        if published_at is not None:
            changes["published_at"] = published_at
        if parsed_at is not None:
            changes["parsed_at"] = parsed_at
        return replace(self, **changes) if changes else self

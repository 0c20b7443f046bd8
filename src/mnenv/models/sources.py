"""Per-source version variants.

| Variant            | Identity key                          |
|--------------------|---------------------------------------|
| GemfileVersion     | version                               |
| SnapVersion        | (version, revision, arch, channel)    |
| HomebrewVersion    | version                               |
| ChocolateyVersion  | version                               |
| BinaryVersion      | version                               |
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Hashable

from mnenv.core.constants import PRODUCT_NAME
from mnenv.models.version import ArtifactVersion


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


@dataclass(frozen=True)
class GemfileVersion(ArtifactVersion):
    """A container-registry tag whose Gemfile pair has (or has not) been archived."""

    gemfile_exists: bool = False
    gemfile_path: str | None = None
    gemfile_lock_path: str | None = None

    @property
    def directory_name(self) -> str:
        """Directory, relative to the source data dir, holding the archived pair."""
        return f"v{self.version}"

    def with_gemfiles(self, gemfile_path: str, gemfile_lock_path: str) -> GemfileVersion:
        return replace(
            self,
            gemfile_exists=True,
            gemfile_path=gemfile_path,
            gemfile_lock_path=gemfile_lock_path,
        )

    def extra_fields(self) -> dict[str, Any]:
        return {
            "gemfile_exists": self.gemfile_exists,
            "gemfile_path": self.gemfile_path,
            "gemfile_lock_path": self.gemfile_lock_path,
        }

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "gemfile_exists": _as_bool(data.get("gemfile_exists", False)),
            "gemfile_path": _optional_str(data.get("gemfile_path")),
            "gemfile_lock_path": _optional_str(data.get("gemfile_lock_path")),
        }


@dataclass(frozen=True)
class SnapVersion(ArtifactVersion):
    """One Snap store revision for an architecture/channel pair.

    The same semantic version legitimately appears several times, once per
    revision, architecture and channel.
    """

    revision: int | None = None
    arch: str = "amd64"
    channel: str = "stable"

    @property
    def identity(self) -> Hashable:
        return (self.version, self.revision, self.arch, self.channel)

    @property
    def display_name(self) -> str:
        return f"{self.version}-{self.revision}" if self.revision is not None else f"v{self.version}"

    def extra_fields(self) -> dict[str, Any]:
        return {"revision": self.revision, "arch": self.arch, "channel": self.channel}

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        revision = data.get("revision")
        return {
            "revision": int(revision) if revision is not None else None,
            "arch": str(data.get("arch") or "amd64"),
            "channel": str(data.get("channel") or "stable"),
        }


@dataclass(frozen=True)
class HomebrewVersion(ArtifactVersion):
    """A tag of the Homebrew tap repository."""

    tag_name: str | None = None
    commit_sha: str | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.tag_name:
            object.__setattr__(self, "tag_name", f"v{self.version}")

    def extra_fields(self) -> dict[str, Any]:
        return {"tag_name": self.tag_name, "commit_sha": self.commit_sha}

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "tag_name": _optional_str(data.get("tag_name")),
            "commit_sha": _optional_str(data.get("commit_sha")),
        }


@dataclass(frozen=True)
class ChocolateyVersion(ArtifactVersion):
    """A package version published on the Chocolatey community feed."""

    package_name: str = PRODUCT_NAME
    is_pre_release: bool = False

    def extra_fields(self) -> dict[str, Any]:
        return {"package_name": self.package_name, "is_pre_release": self.is_pre_release}

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "package_name": str(data.get("package_name") or PRODUCT_NAME),
            "is_pre_release": _as_bool(data.get("is_pre_release", False)),
        }


@dataclass(frozen=True)
class BinaryVersion(ArtifactVersion):
    """A GitHub release of the self-contained binary.

    ``metadata`` keeps the release tag, its HTML URL and the asset names.
    """

    metadata: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def display_name(self) -> str:
        return self.version

    @property
    def tag_name(self) -> str:
        return str(self.metadata.get("tag_name") or f"v{self.version}")

    @property
    def html_url(self) -> str | None:
        return self.metadata.get("html_url")

    @property
    def assets(self) -> list[str]:
        return list(self.metadata.get("assets") or [])

    def binary_for_platform(self, platform: str) -> bool:
        """Return True when the release ships an asset for *platform*."""
        return asset_name_for(platform) in self.assets

    def extra_fields(self) -> dict[str, Any]:
        return {"metadata": dict(self.metadata)}

    @classmethod
    def _extra_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        metadata = data.get("metadata")
        return {"metadata": dict(metadata) if isinstance(metadata, dict) else {}}


def asset_name_for(platform: str) -> str:
    """Release asset name of the binary built for *platform*."""
    return f"{PRODUCT_NAME}-{platform}"

"""Version entity model: the shared base and one variant per release channel."""

from .sources import (
    BinaryVersion,
    ChocolateyVersion,
    GemfileVersion,
    HomebrewVersion,
    SnapVersion,
    asset_name_for,
)
from .version import (
    ArtifactVersion,
    compare_versions,
    format_timestamp,
    parse_timestamp,
    parse_version,
    sort_versions,
    version_key,
)

__all__ = [
    "ArtifactVersion",
    "BinaryVersion",
    "ChocolateyVersion",
    "GemfileVersion",
    "HomebrewVersion",
    "SnapVersion",
    "asset_name_for",
    "compare_versions",
    "format_timestamp",
    "parse_timestamp",
    "parse_version",
    "sort_versions",
    "version_key",
]

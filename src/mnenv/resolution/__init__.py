"""Resolution of the active version and source."""

from mnenv.resolution.resolver import (
    ContextResolver,
    InstalledVersion,
    Resolution,
    ResolutionTier,
    find_marker,
    read_marker,
    write_marker,
)

__all__ = [
    "ContextResolver",
    "InstalledVersion",
    "Resolution",
    "ResolutionTier",
    "find_marker",
    "read_marker",
    "write_marker",
]

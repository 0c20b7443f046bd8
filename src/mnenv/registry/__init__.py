"""Version registry: per-source repositories and the refresh pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mnenv.registry.gemfile_extractor import GemfileExtractor
from mnenv.registry.pipeline import (
    Materializer,
    RecordOnlyMaterializer,
    RefreshMode,
    RefreshPipeline,
    RefreshReport,
    merge_current_heads,
)
from mnenv.registry.repository import Repository
from mnenv.registry.sources import (
    REPOSITORIES,
    BinaryRepository,
    ChocolateyRepository,
    GemfileRepository,
    HomebrewRepository,
    SnapRepository,
    repository_class,
)

if TYPE_CHECKING:
    import httpx

    from mnenv.runtime.config import MnenvConfig


def build_pipeline(source_name: str, config: MnenvConfig, client: httpx.Client) -> RefreshPipeline:
    """Wire repository, fetcher and materializer for *source_name*."""
    from mnenv.fetchers import create_fetcher

    repository = repository_class(source_name).for_config(config)
    materializer: Materializer = (
        GemfileExtractor(repository.data_dir)
        if source_name == GemfileRepository.source_name
        else RecordOnlyMaterializer()
    )
    return RefreshPipeline(
        repository,
        create_fetcher(source_name, client, config),
        materializer,
        clock=config.clock,
    )


__all__ = [
    "BinaryRepository",
    "ChocolateyRepository",
    "GemfileExtractor",
    "GemfileRepository",
    "HomebrewRepository",
    "Materializer",
    "REPOSITORIES",
    "RecordOnlyMaterializer",
    "RefreshMode",
    "RefreshPipeline",
    "RefreshReport",
    "Repository",
    "SnapRepository",
    "build_pipeline",
    "merge_current_heads",
    "repository_class",
]

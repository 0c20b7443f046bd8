"""Version and source resolution across environment, local and global tiers."""

from __future__ import annotations

from pathlib import Path

import pytest

from mnenv.errors import MarkerReadError, NotInstalledError, ResolutionError
from mnenv.resolution import ContextResolver, ResolutionTier, find_marker, read_marker, write_marker


@pytest.fixture()
def nested(tmp_path: Path) -> Path:
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    return deep


class TestMarkers:
    def test_first_line_trimmed(self, tmp_path: Path) -> None:
        marker = tmp_path / ".metanorma-version"
        marker.write_text("  1.2.3  \nignored\n", encoding="utf-8")
        assert read_marker(marker) == "1.2.3"

    def test_missing_or_blank(self, tmp_path: Path) -> None:
        assert read_marker(tmp_path / "absent") is None
        blank = tmp_path / "blank"
        blank.write_text("\n", encoding="utf-8")
        assert read_marker(blank) is None

    def test_unreadable_marker_raises_with_path(self, tmp_path: Path, monkeypatch) -> None:
        marker = tmp_path / ".metanorma-version"
        marker.write_text("1.2.3\n", encoding="utf-8")

        def deny(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "read_text", deny)

        with pytest.raises(MarkerReadError, match="Fix its permissions") as excinfo:
            read_marker(marker)
        assert excinfo.value.path == marker
        assert str(marker) in str(excinfo.value)

    def test_write_then_read(self, tmp_path: Path) -> None:
        path = write_marker(tmp_path / "deep" / "version", "1.0.0")
        assert path.read_text(encoding="utf-8") == "1.0.0\n"

    def test_find_walks_to_ancestor(self, tmp_path: Path, nested: Path) -> None:
        write_marker(tmp_path / "a" / ".metanorma-version", "1.0.0")
        assert find_marker(nested, ".metanorma-version") == tmp_path / "a" / ".metanorma-version"

    def test_find_skips_empty_marker(self, tmp_path: Path, nested: Path) -> None:
        write_marker(tmp_path / "a" / ".metanorma-version", "1.0.0")
        (nested / ".metanorma-version").write_text("", encoding="utf-8")
        assert find_marker(nested, ".metanorma-version") == tmp_path / "a" / ".metanorma-version"


class TestResolveVersion:
    def test_environment_wins(self, make_config, mnenv_root: Path, nested: Path) -> None:
        write_marker(mnenv_root / "version", "1.0.0")
        write_marker(nested / ".metanorma-version", "2.0.0")
        resolver = ContextResolver(make_config(cwd=nested, environ={"MNENV_VERSION": "3.0.0"}))

        resolution = resolver.resolve_version()

        assert (resolution.value, resolution.tier) == ("3.0.0", ResolutionTier.ENVIRONMENT)
        assert resolution.origin == "MNENV_VERSION"

    def test_empty_environment_is_unset(self, make_config, mnenv_root: Path) -> None:
        write_marker(mnenv_root / "version", "1.0.0")
        resolver = ContextResolver(make_config(environ={"MNENV_VERSION": ""}))

        assert resolver.resolve_version().tier is ResolutionTier.GLOBAL

    def test_local_marker_found_from_subdirectory(self, make_config, mnenv_root: Path, tmp_path: Path, nested: Path) -> None:
        write_marker(mnenv_root / "version", "1.0.0")
        write_marker(tmp_path / "a" / ".metanorma-version", "2.0.0")

        resolution = ContextResolver(make_config(cwd=nested)).resolve_version()

        assert (resolution.value, resolution.tier) == ("2.0.0", ResolutionTier.LOCAL)
        assert resolution.origin == str(tmp_path / "a" / ".metanorma-version")

    def test_sibling_tree_falls_back_to_global(self, make_config, mnenv_root: Path, tmp_path: Path) -> None:
        write_marker(mnenv_root / "version", "1.0.0")
        write_marker(tmp_path / "a" / "b" / "c" / ".metanorma-version", "2.0.0")
        elsewhere = tmp_path / "x"
        elsewhere.mkdir()

        resolution = ContextResolver(make_config(cwd=elsewhere)).resolve_version()

        assert (resolution.value, resolution.tier) == ("1.0.0", ResolutionTier.GLOBAL)

    def test_nearest_marker_wins(self, make_config, tmp_path: Path, nested: Path) -> None:
        write_marker(tmp_path / "a" / ".metanorma-version", "1.0.0")
        write_marker(tmp_path / "a" / "b" / ".metanorma-version", "1.5.0")

        assert ContextResolver(make_config(cwd=nested)).resolve_version().value == "1.5.0"

    def test_nothing_set(self, config) -> None:
        with pytest.raises(ResolutionError, match="version not set"):
            ContextResolver(config).resolve_version()

    def test_rereads_filesystem_on_each_call(self, config, mnenv_root: Path) -> None:
        resolver = ContextResolver(config)
        write_marker(mnenv_root / "version", "1.0.0")
        assert resolver.resolve_version().value == "1.0.0"
        write_marker(mnenv_root / "version", "1.1.0")
        assert resolver.resolve_version().value == "1.1.0"


class TestResolveSource:
    def test_defaults_to_gemfile(self, config) -> None:
        resolution = ContextResolver(config).resolve_source()
        assert (resolution.value, resolution.tier) == ("gemfile", ResolutionTier.DEFAULT)
        assert resolution.describe() == "default"

    def test_tiers_are_independent(self, make_config, mnenv_root: Path, tmp_path: Path) -> None:
        write_marker(mnenv_root / "source", "binary")
        write_marker(tmp_path / "work" / ".metanorma-version", "1.0.0")

        resolver = ContextResolver(make_config())
        version, source = resolver.resolve_current()

        assert version.tier is ResolutionTier.LOCAL
        assert (source.value, source.tier) == ("binary", ResolutionTier.GLOBAL)


class TestInstalled:
    def test_lists_in_numeric_order_and_skips_junk(self, config, install_version, mnenv_root: Path) -> None:
        install_version("1.10.0")
        install_version("1.2.0", source="binary")
        install_version("1.9.0", source=None)
        (mnenv_root / "versions" / "scratch").mkdir()

        installed = ContextResolver(config).installed()

        assert [(e.version, e.source) for e in installed] == [("1.2.0", "binary"), ("1.9.0", None), ("1.10.0", "gemfile")]

    def test_verify_installed(self, config, install_version) -> None:
        directory = install_version("1.0.0", source="gemfile")
        assert ContextResolver(config).verify_installed("1.0.0", "gemfile") == directory

    def test_verify_missing_version(self, config) -> None:
        with pytest.raises(NotInstalledError, match="mnenv install 1.0.0 --source binary"):
            ContextResolver(config).verify_installed("1.0.0", "binary")

    def test_verify_source_mismatch(self, config, install_version) -> None:
        install_version("1.0.0", source="gemfile")
        with pytest.raises(NotInstalledError, match="installed from source 'gemfile'"):
            ContextResolver(config).verify_installed("1.0.0", "binary")

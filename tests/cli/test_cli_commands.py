"""End-to-end command tests through typer's CliRunner."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from mnenv import __version__
from mnenv.cli.app import app
from mnenv.errors import ExtractionError
from mnenv.models import GemfileVersion
from mnenv.registry import GemfileRepository, RefreshPipeline

runner = CliRunner()


@pytest.fixture()
def workdir(tmp_path: Path, mnenv_root: Path, monkeypatch) -> Path:
    for name in ("MNENV_VERSION", "MNENV_SOURCE", "MNENV_DATA_DIR", "GITHUB_TOKEN", "GH_TOKEN", "SHELL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MNENV_ROOT", str(mnenv_root))
    work = tmp_path / "work"
    work.mkdir(exist_ok=True)
    monkeypatch.chdir(work)
    return work


def _seed_gemfile(mnenv_root: Path, *versions: str) -> GemfileRepository:
    repo = GemfileRepository(mnenv_root / "data" / "gemfile")
    repo.save_all(GemfileVersion(v) for v in versions)
    return repo


class TestBasics:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"mnenv {__version__}"

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "Usage" in result.output


class TestSourceCommands:
    def test_list_empty(self, workdir: Path) -> None:
        result = runner.invoke(app, ["gemfile", "list"])
        assert result.exit_code == 0
        assert "mnenv gemfile refresh" in result.stdout

    def test_list_json(self, workdir: Path, mnenv_root: Path) -> None:
        _seed_gemfile(mnenv_root, "1.10.0", "1.2.0")

        result = runner.invoke(app, ["gemfile", "list", "--format", "json"])

        payload = json.loads(result.stdout)
        assert payload["source"] == "gemfile"
        assert payload["count"] == 2
        assert payload["latest"] == "1.10.0"
        assert [v["display_name"] for v in payload["versions"]] == ["v1.2.0", "v1.10.0"]

    def test_info(self, workdir: Path, mnenv_root: Path) -> None:
        _seed_gemfile(mnenv_root, "1.2.0")

        result = runner.invoke(app, ["gemfile", "info", "1.2.0", "-f", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["version"] == "1.2.0"

    def test_info_unknown(self, workdir: Path) -> None:
        result = runner.invoke(app, ["homebrew", "info", "9.9.9"])
        assert result.exit_code == 1
        assert "mnenv homebrew list" in result.output

    def test_refresh_reports_counts(self, workdir: Path, monkeypatch) -> None:
        class Fetcher:
            source_name = "gemfile"

            def fetch_all(self):
                return [GemfileVersion("1.0.0"), GemfileVersion("1.1.0")]

        class Materializer:
            def is_materialized(self, version):
                return False

            def materialize(self, version):
                if version.version == "1.1.0":
                    raise ExtractionError("pull denied")
                return version

            def remove(self, version):
                pass

        def fake_pipeline(source_name, config, client):
            return RefreshPipeline(GemfileRepository.for_config(config), Fetcher(), Materializer())

        monkeypatch.setattr("mnenv.cli.commands.sources.build_pipeline", fake_pipeline)

        result = runner.invoke(app, ["gemfile", "refresh"])

        assert result.exit_code == 1
        assert "1.1.0: pull denied" in result.output
        assert "mnenv gemfile update" in result.output


class TestSessionCommands:
    def test_global_and_current(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        install_version("1.0.0", source="binary")

        result = runner.invoke(app, ["global", "1.0.0"])
        assert result.exit_code == 0, result.output
        assert (mnenv_root / "version").read_text(encoding="utf-8") == "1.0.0\n"
        assert (mnenv_root / "source").read_text(encoding="utf-8") == "binary\n"

        current = json.loads(runner.invoke(app, ["current", "--format", "json"]).stdout)
        assert current["version"] == "1.0.0"
        assert current["version_tier"] == "global"
        assert current["source"] == "binary"

    def test_local_writes_markers_in_cwd(self, workdir: Path, install_version) -> None:
        install_version("1.1.0")

        result = runner.invoke(app, ["local", "1.1.0"])

        assert result.exit_code == 0, result.output
        assert (workdir / ".metanorma-version").read_text(encoding="utf-8") == "1.1.0\n"
        assert (workdir / ".metanorma-source").read_text(encoding="utf-8") == "gemfile\n"

    def test_source_mismatch_rejected(self, workdir: Path, install_version) -> None:
        install_version("1.0.0", source="gemfile")

        result = runner.invoke(app, ["local", "1.0.0", "--source", "binary"])

        assert result.exit_code == 1
        assert "installed from source 'gemfile'" in result.output
        assert not (workdir / ".metanorma-version").exists()

    def test_not_installed(self, workdir: Path) -> None:
        result = runner.invoke(app, ["global", "2.0.0"])
        assert result.exit_code == 1
        assert "mnenv install 2.0.0" in result.output

    def test_unknown_source(self, workdir: Path) -> None:
        result = runner.invoke(app, ["global", "1.0.0", "--source", "snap"])
        assert result.exit_code == 1
        assert "Unknown source: snap" in result.output

    @pytest.mark.parametrize("command", ["global", "local", "use"])
    def test_malformed_version_rejected(self, workdir: Path, mnenv_root: Path, command: str) -> None:
        result = runner.invoke(app, [command, ".."])

        assert result.exit_code == 1
        assert "Invalid version '..'" in result.output
        assert not (mnenv_root / "version").exists()
        assert not (workdir / ".metanorma-version").exists()

    def test_current_without_version(self, workdir: Path) -> None:
        result = runner.invoke(app, ["current"])
        assert result.exit_code == 1
        assert "version not set" in result.output

    def test_use_prints_shell_commands(self, workdir: Path, install_version) -> None:
        install_version("1.0.0", source="binary")

        result = runner.invoke(app, ["use", "1.0.0", "--shell", "bash"])

        assert result.exit_code == 0, result.output
        assert "export MNENV_VERSION=1.0.0" in result.stdout
        assert "export MNENV_SOURCE=binary" in result.stdout

    def test_versions_json(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        install_version("1.0.0")
        install_version("1.10.0", source="binary")
        (mnenv_root / "version").write_text("1.10.0\n", encoding="utf-8")
        (mnenv_root / "source").write_text("binary\n", encoding="utf-8")

        payload = json.loads(runner.invoke(app, ["versions", "-f", "json"]).stdout)

        assert payload["current_version"] == "1.10.0"
        assert payload["installed"] == [
            {"version": "1.0.0", "source": "gemfile", "current": False},
            {"version": "1.10.0", "source": "binary", "current": True},
        ]

    def test_versions_empty(self, workdir: Path) -> None:
        result = runner.invoke(app, ["versions"])
        assert result.exit_code == 0
        assert "No versions installed" in result.stdout

    def test_init(self, workdir: Path, mnenv_root: Path, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        result = runner.invoke(app, ["init", "--shell", "zsh"])

        assert result.exit_code == 0, result.output
        assert (mnenv_root / "shims").is_dir()
        assert ".zshrc" in result.stdout
        assert f'export PATH="{mnenv_root / "shims"}:$PATH"' in result.stdout


class TestInstallCommands:
    def test_available_json(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        _seed_gemfile(mnenv_root, "1.0.0", "1.1.0")
        install_version("1.0.0")
        (mnenv_root / "version").write_text("1.0.0\n", encoding="utf-8")

        payload = json.loads(runner.invoke(app, ["available", "gemfile", "--format", "json"]).stdout)

        assert payload["source"] == "gemfile"
        assert [(r["version"], r["installed"], r["current"]) for r in payload["versions"]] == [
            ("1.1.0", False, False),
            ("1.0.0", True, True),
        ]

    def test_install_list(self, workdir: Path, mnenv_root: Path) -> None:
        _seed_gemfile(mnenv_root, "1.0.0")

        result = runner.invoke(app, ["install", "--list"])

        assert result.exit_code == 0
        assert "v1.0.0" in result.stdout

    def test_install_already_installed_can_be_declined(self, workdir: Path, install_version) -> None:
        install_version("1.0.0")

        result = runner.invoke(app, ["install", "1.0.0", "--source", "gemfile"], input="n\n")

        assert result.exit_code == 0
        assert "Installation cancelled" in result.output

    def test_install_reports_missing_gemfile_entry(self, workdir: Path) -> None:
        result = runner.invoke(app, ["install", "1.0.0", "--source", "gemfile"])

        assert result.exit_code == 1
        assert "mnenv gemfile refresh" in result.output

    def test_uninstall_force(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        install_version("1.0.0", executables=("bin/metanorma",))

        result = runner.invoke(app, ["uninstall", "1.0.0", "--force"])

        assert result.exit_code == 0, result.output
        assert not (mnenv_root / "versions" / "1.0.0").exists()

    def test_uninstall_declined(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        install_version("1.0.0")

        result = runner.invoke(app, ["uninstall", "1.0.0"], input="n\n")

        assert "Uninstallation cancelled" in result.output
        assert (mnenv_root / "versions" / "1.0.0").is_dir()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX shims only")
    def test_rehash(self, workdir: Path, mnenv_root: Path, install_version) -> None:
        install_version("1.0.0", executables=("bin/metanorma", "bin/relaton"))

        result = runner.invoke(app, ["rehash"])

        assert result.exit_code == 0, result.output
        assert "Regenerated 2 shim(s)" in result.stdout
        assert (mnenv_root / "shims" / "relaton").is_file()

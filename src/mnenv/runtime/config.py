"""Runtime configuration injected into every mnenv component.

``load_config`` is called once at the CLI entry point. Components never read
``os.environ``, ``Path.cwd()`` or the wall clock themselves; they receive a
:class:`MnenvConfig` (or the values they need from it) at construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from mnenv.core.constants import CONFIG_FILENAME
from mnenv.errors import ConfigError
from mnenv.runtime.home import get_data_dir, get_mnenv_home, shims_dir, versions_dir

DEFAULT_HTTP_TIMEOUT = 30.0


def utc_now() -> datetime:
    """Current time in UTC, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class MnenvConfig:
    """Immutable configuration for one mnenv invocation."""

    root: Path
    data_dir: Path
    cwd: Path
    environ: Mapping[str, str] = field(default_factory=dict)
    clock: Callable[[], datetime] = utc_now
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    github_token: str | None = None

    @property
    def versions_dir(self) -> Path:
        return versions_dir(self.root)

    @property
    def shims_dir(self) -> Path:
        return shims_dir(self.root)

    def source_data_dir(self, source_name: str) -> Path:
        """Directory holding ``versions.yaml`` (and artifacts) for one source."""
        return self.data_dir / source_name


def _read_settings(config_path: Path) -> dict[str, Any]:
    if not config_path.is_file():
        return {}

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except (YAMLError, OSError) as exc:
        raise ConfigError(
            f"Failed to parse {config_path}: {exc}. Fix or remove the file and retry."
        ) from exc

    return payload if isinstance(payload, dict) else {}


def _github_token(settings: Mapping[str, Any], environ: Mapping[str, str]) -> str | None:
    """Return a sanitized GitHub token (environment wins over config.yaml)."""
    github = settings.get("github")
    configured = github.get("token") if isinstance(github, dict) else None
    token = environ.get("GH_TOKEN") or environ.get("GITHUB_TOKEN") or configured or ""
    return str(token).strip() or None


def _http_timeout(settings: Mapping[str, Any], config_path: Path) -> float:
    http = settings.get("http")
    if not isinstance(http, dict) or http.get("timeout") is None:
        return DEFAULT_HTTP_TIMEOUT
    try:
        timeout = float(http["timeout"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid http.timeout in {config_path}: {http['timeout']!r}. Expected a number of seconds."
        ) from exc
    if timeout <= 0:
        raise ConfigError(f"Invalid http.timeout in {config_path}: must be positive.")
    return timeout


def load_config(
    *,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> MnenvConfig:
    """Build the configuration for this invocation.

    Args:
        environ: Environment mapping (defaults to a snapshot of ``os.environ``).
        cwd: Working directory (defaults to ``Path.cwd()``).
        clock: Source of "now" used for ``parsed_at`` and metadata timestamps.

    Raises:
        ConfigError: If ``<root>/config.yaml`` exists but is invalid.
    """
    env = dict(os.environ) if environ is None else dict(environ)
    root = get_mnenv_home(env)
    settings = _read_settings(root / CONFIG_FILENAME)

    return MnenvConfig(
        root=root,
        data_dir=get_data_dir(root, env),
        cwd=cwd if cwd is not None else Path.cwd(),
        environ=env,
        clock=clock,
        http_timeout=_http_timeout(settings, root / CONFIG_FILENAME),
        github_token=_github_token(settings, env),
    )

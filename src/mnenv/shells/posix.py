"""POSIX ``sh`` shims (bash, sh, dash, zsh, ksh and fish all run them)."""

from __future__ import annotations

from pathlib import Path

from mnenv.shells.base import render

SHIM_TEMPLATE = """\
#!/bin/sh
# mnenv shim for @EXECUTABLE@
set -e

MNENV_ROOT="${MNENV_ROOT:-$HOME/.mnenv}"
export MNENV_ROOT

mnenv_read_marker() {
  marker_value=""
  [ -f "$1" ] || return 1
  marker_value=$(head -n 1 "$1" | sed -e 's/^[[:space:]]*//' -e 's/[[:space:]]*$//')
  [ -n "$marker_value" ]
}

mnenv_find_marker() {
  marker_dir=$PWD
  while :; do
    if mnenv_read_marker "$marker_dir/$1"; then
      return 0
    fi
    if [ "$marker_dir" = "/" ] || [ -z "$marker_dir" ]; then
      return 1
    fi
    marker_dir=$(dirname "$marker_dir")
  done
}

VERSION="${MNENV_VERSION:-}"
if [ -z "$VERSION" ]; then
  if mnenv_find_marker .metanorma-version; then
    VERSION=$marker_value
  elif mnenv_read_marker "$MNENV_ROOT/version"; then
    VERSION=$marker_value
  fi
fi

SOURCE="${MNENV_SOURCE:-}"
if [ -z "$SOURCE" ]; then
  if mnenv_find_marker .metanorma-source; then
    SOURCE=$marker_value
  elif mnenv_read_marker "$MNENV_ROOT/source"; then
    SOURCE=$marker_value
  else
    SOURCE=gemfile
  fi
fi

if [ -z "$VERSION" ]; then
  echo "mnenv: version not set" >&2
  echo "Set a version with: mnenv global <version> or mnenv local <version>" >&2
  exit 1
fi

if [ "$SOURCE" = "binary" ]; then
  EXECUTABLE="$MNENV_ROOT/versions/$VERSION/metanorma"
else
  EXECUTABLE="$MNENV_ROOT/versions/$VERSION/bin/@EXECUTABLE@"
fi

if [ ! -f "$EXECUTABLE" ]; then
  echo "mnenv: @EXECUTABLE@ not installed for version $VERSION (source: $SOURCE)" >&2
  echo "Install it with: mnenv install $VERSION --source $SOURCE" >&2
  exit 1
fi

exec "$EXECUTABLE" "$@"
"""

# rc file per shell; shells not listed read ~/.profile
CONFIG_FILES = {
    "bash": ".bashrc",
    "zsh": ".zshrc",
    "fish": ".config/fish/config.fish",
}


class PosixShell:
    shim_extension = ""
    is_windows_family = False

    def __init__(self, name: str = "bash") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"PosixShell(name={self.name!r})"

    def shim_body(self, executable: str) -> str:
        return render(SHIM_TEMPLATE, executable)

    def describe_activation(self, version: str, source: str | None = None) -> str:
        if self.name == "fish":
            lines = [f"set -gx MNENV_VERSION {version}"]
            if source:
                lines.append(f"set -gx MNENV_SOURCE {source}")
            return "\n".join(lines)

        lines = [f"export MNENV_VERSION={version}"]
        if source:
            lines.append(f"export MNENV_SOURCE={source}")
        suffix = f" --source {source}" if source else ""
        lines.append(f'# Run this in your shell, or use: eval "$(mnenv use {version}{suffix})"')
        return "\n".join(lines)

    def config_file_path(self, home: Path) -> Path | None:
        return home / CONFIG_FILES.get(self.name, ".profile")

    def path_setup(self, shims_dir: Path) -> str:
        if self.name == "fish":
            return f"set -gx PATH {shims_dir} $PATH"
        return f'export PATH="{shims_dir}:$PATH"'

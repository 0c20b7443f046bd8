"""Names shared by the resolver, the shell adapters and the installers.

The shim scripts embed these values verbatim, so changing one of them
changes the behaviour of every generated shim after the next ``mnenv rehash``.
"""

from __future__ import annotations

PRODUCT_NAME = "metanorma"
TOOL_NAME = "mnenv"

# Environment
ROOT_ENV_VAR = "MNENV_ROOT"
DATA_DIR_ENV_VAR = "MNENV_DATA_DIR"
VERSION_ENV_VAR = "MNENV_VERSION"
SOURCE_ENV_VAR = "MNENV_SOURCE"

# Marker files
LOCAL_VERSION_FILE = f".{PRODUCT_NAME}-version"
LOCAL_SOURCE_FILE = f".{PRODUCT_NAME}-source"
GLOBAL_VERSION_FILE = "version"
GLOBAL_SOURCE_FILE = "source"
INSTALL_SOURCE_FILE = "source"

# Layout under the mnenv root
ROOT_DIRNAME = f".{TOOL_NAME}"
VERSIONS_DIRNAME = "versions"
SHIMS_DIRNAME = "shims"
DATA_DIRNAME = "data"
CONFIG_FILENAME = "config.yaml"
BIN_DIRNAME = "bin"

# Installation sources
SOURCE_GEMFILE = "gemfile"
SOURCE_BINARY = "binary"
INSTALL_SOURCES = (SOURCE_GEMFILE, SOURCE_BINARY)
DEFAULT_SOURCE = SOURCE_GEMFILE

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

"""Runtime configuration for mnenv.

This subpackage locates the mnenv root (``~/.mnenv`` or ``MNENV_ROOT``) and
builds the :class:`MnenvConfig` value threaded through the application.
"""

from mnenv.runtime.config import MnenvConfig, load_config, utc_now
from mnenv.runtime.home import get_data_dir, get_mnenv_home

__all__ = [
    "MnenvConfig",
    "get_data_dir",
    "get_mnenv_home",
    "load_config",
    "utc_now",
]

"""Generated dispatch scripts."""

from mnenv.shims.manager import ShimManager

__all__ = ["ShimManager"]
